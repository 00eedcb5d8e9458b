from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import requests

from ..common.errors import AppError, ErrorKind, Severity


@dataclass(frozen=True)
class ResponseError:
    """The server answered with a non-success status."""

    status: int
    body: Any = None
    url: Optional[str] = None


@dataclass(frozen=True)
class TransportError:
    """The request went out but no response came back."""

    request_info: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ConfigurationError:
    """The request could not be dispatched at all."""

    message: str


RequestFailure = Union[ResponseError, TransportError, ConfigurationError]


_SEVERITY_BY_FAILURE = {
    ResponseError: Severity.WARN,
    TransportError: Severity.WARN,
    ConfigurationError: Severity.ABORT,
}

_KIND_BY_FAILURE = {
    ResponseError: ErrorKind.HTTP,
    TransportError: ErrorKind.TRANSPORT,
    ConfigurationError: ErrorKind.CONFIG,
}

# Exceptions raised after the request left the process.
_NO_RESPONSE_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
    requests.exceptions.ChunkedEncodingError,
)


class RequestFailed(AppError):
    """
    Raised by the transport adapter. Carries exactly one tagged failure so
    callers never need to inspect the underlying exception.
    """

    def __init__(self, failure: RequestFailure, original_exception: Optional[Exception] = None):
        super().__init__(
            describe_failure(failure),
            _SEVERITY_BY_FAILURE[type(failure)],
            _KIND_BY_FAILURE[type(failure)],
            original_exception=original_exception,
        )
        self.failure = failure


def describe_failure(failure: RequestFailure) -> str:
    match failure:
        case ResponseError(status=status, url=url):
            return f"HTTP {status}" + (f" from {url}" if url else "")
        case TransportError(request_info=info):
            return f"No response for {info.get('method', '?')} {info.get('url', '?')}"
        case ConfigurationError(message=message):
            return message
    return repr(failure)


def parse_body(response) -> Any:
    """
    Decode a response body the way callers expect it: JSON when it parses,
    the raw text otherwise, `None` for an empty body.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


_SECRET_HEADER_MARKERS = ("auth", "key", "cookie", "token")


def redact_headers(headers) -> Dict[str, str]:
    """Drop credential-bearing headers before they reach a log line."""
    return {
        k: v for k, v in headers.items() if not any(marker in k.lower() for marker in _SECRET_HEADER_MARKERS)
    }


def describe_request(request) -> Dict[str, Any]:
    if request is None:
        return {}
    return {
        "method": getattr(request, "method", None),
        "url": getattr(request, "url", None),
        "headers": redact_headers(getattr(request, "headers", None) or {}),
    }


def classify_failure(exc: Exception) -> RequestFailure:
    """
    Map an exception raised while talking to the server onto one of the three
    failure variants. Order matters: a response wins over a request.
    """
    if isinstance(exc, RequestFailed):
        return exc.failure

    if isinstance(exc, requests.RequestException):
        response = exc.response
        if response is not None:
            return ResponseError(status=response.status_code, body=parse_body(response), url=response.url)
        if isinstance(exc, _NO_RESPONSE_ERRORS):
            return TransportError(request_info=describe_request(exc.request))

    return ConfigurationError(message=str(exc) or exc.__class__.__name__)
