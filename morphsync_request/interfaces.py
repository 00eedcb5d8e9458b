from abc import ABC, abstractmethod
from typing import Any


class IHttpClient(ABC):
    @abstractmethod
    def request(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        Perform one exchange and return an object exposing `data` and
        `status_code`. Failures are raised as `RequestFailed`.
        """
        pass

    def close(self) -> None:
        pass


class ILogSink(ABC):
    @abstractmethod
    def write(self, message: str, channel: str) -> None:
        pass
