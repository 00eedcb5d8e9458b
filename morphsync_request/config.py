import yaml
from copy import deepcopy
from pathlib import Path
from typing import Optional, Literal, Dict, Any, Tuple
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

DEFAULT_HEADERS = {"Content-Type": "application/json"}
ERROR_CHANNEL = "request/error"


class TimeoutConfig(BaseModel):
    connect: Optional[float] = Field(default=None, gt=0)
    read: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _both_or_neither(self):
        if (self.connect is None) != (self.read is None):
            raise ValueError("timeout.connect and timeout.read must be set together.")
        return self

    def as_tuple(self) -> Optional[Tuple[float, float]]:
        if self.connect is None:
            return None
        return (self.connect, self.read)


class LoggingConfig(BaseModel):
    channel: str = ERROR_CHANNEL
    logs_dir: Optional[str] = None
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "ERROR"

    @field_validator("channel")
    @classmethod
    def _channel_not_blank(cls, value: str) -> str:
        if not value.strip("/ "):
            raise ValueError("logging.channel must not be empty.")
        return value


class ClientConfig(BaseModel):
    default_headers: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    error_policy: Literal["swallow", "raise", "result"] = "swallow"
    timeout: TimeoutConfig = TimeoutConfig()
    logging: LoggingConfig = LoggingConfig()


def _load_yaml_mapping(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Error parsing YAML config: {exc}")

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file at {path} must contain a mapping at the top level.")
    return data


def _deep_merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict) and key != "default_headers":
            result[key] = _deep_merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: str) -> ClientConfig:
    """
    Load YAML config, merge it over the built-in defaults, validate with
    Pydantic, and return a typed config object.

    `default_headers` is replaced wholesale, so a file can drop the JSON
    content type entirely.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found at: {config_path}")

    user_config = _load_yaml_mapping(path)
    merged_config = _deep_merge_dicts(ClientConfig().model_dump(), user_config)

    try:
        return ClientConfig(**merged_config)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed: {e}")
