import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from requests.structures import CaseInsensitiveDict

from ..config import ClientConfig
from ..interfaces import IHttpClient, ILogSink
from ..ops.logger import LogSink
from .client import RequestsHttpClient
from .failures import (
    ConfigurationError,
    RequestFailed,
    RequestFailure,
    ResponseError,
    TransportError,
    classify_failure,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestOutcome:
    """Returned by every operation when the client runs with error_policy="result"."""

    body: Any = None
    failure: Optional[RequestFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


class RequestClient:
    """
    Issues GET/POST/PUT/DELETE requests against one base URL.

    Every operation returns the parsed response body. Failures are written to
    the log sink under the "request/error" channel and, with the default
    "swallow" policy, the operation returns None instead of raising.
    """

    def __init__(
        self,
        base_url: str,
        transport: Optional[IHttpClient] = None,
        log_sink: Optional[ILogSink] = None,
        config: Optional[ClientConfig] = None,
    ):
        self.config = config or ClientConfig()
        self.base_url = base_url
        self.default_headers: Dict[str, str] = dict(self.config.default_headers)
        self.transport = transport or RequestsHttpClient(base_url, timeout=self.config.timeout.as_tuple())
        self._owns_log_sink = log_sink is None
        self.log_sink = log_sink or LogSink(
            logs_dir=self.config.logging.logs_dir,
            level=self.config.logging.level,
        )
        self.channel = self.config.logging.channel

    def get_request(self, endpoint: str, headers: Optional[Dict[str, str]] = None) -> Any:
        return self._send("GET", endpoint, headers=headers)

    def post_request(self, endpoint: str, data: Any = None, headers: Optional[Dict[str, str]] = None) -> Any:
        return self._send("POST", endpoint, data=data, headers=headers)

    def put_request(self, endpoint: str, data: Any = None, headers: Optional[Dict[str, str]] = None) -> Any:
        return self._send("PUT", endpoint, data=data, headers=headers)

    def delete_request(self, endpoint: str, headers: Optional[Dict[str, str]] = None) -> Any:
        return self._send("DELETE", endpoint, headers=headers)

    def merge_headers(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Per-call headers over the defaults, matched case-insensitively. The
        defaults themselves are left untouched.
        """
        merged = CaseInsensitiveDict(self.default_headers)
        merged.update(headers or {})
        return dict(merged.items())

    def handle_error(self, failure: RequestFailure) -> None:
        match failure:
            case ResponseError(body=body):
                message = "Error response: " + _to_json(body)
            case TransportError(request_info=request_info):
                message = "Error request:" + _to_json(request_info)
            case ConfigurationError(message=reason):
                message = "General error:" + reason
            case _:
                message = "General error:" + str(failure)
        self.log_sink.write(message, self.channel)

    def close(self) -> None:
        self.transport.close()
        if self._owns_log_sink:
            self.log_sink.close()

    def _send(self, method: str, endpoint: str, data: Any = None, headers: Optional[Dict[str, str]] = None) -> Any:
        kwargs: Dict[str, Any] = {"headers": self.merge_headers(headers)}
        if data is not None:
            kwargs["data"] = data

        try:
            response = self.transport.request(method, endpoint, **kwargs)
        except Exception as exc:
            failure = classify_failure(exc)
            logger.debug("%s %s failed: %r", method, endpoint, failure)
            self.handle_error(failure)
            return self._on_failure(failure, exc)

        if self.config.error_policy == "result":
            return RequestOutcome(body=response.data)
        return response.data

    def _on_failure(self, failure: RequestFailure, exc: Exception) -> Any:
        if self.config.error_policy == "raise":
            if isinstance(exc, RequestFailed):
                raise exc
            raise RequestFailed(failure, original_exception=exc) from exc
        if self.config.error_policy == "result":
            return RequestOutcome(failure=failure)
        return None
