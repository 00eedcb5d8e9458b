import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import requests

from ..interfaces import IHttpClient
from .failures import ConfigurationError, RequestFailed, ResponseError, classify_failure, parse_body

logger = logging.getLogger(__name__)

_RAW_BODY_TYPES = (str, bytes, bytearray)


@dataclass
class TransportResponse:
    status_code: int
    data: Any
    headers: Dict[str, str]


def join_url(base_url: str, endpoint: str) -> str:
    """
    Absolute endpoints are used as-is; relative ones are appended to the base
    URL with exactly one slash in between.
    """
    if endpoint.lower().startswith(("http://", "https://")):
        return endpoint
    if not endpoint:
        return base_url
    if not base_url:
        return endpoint
    return base_url.rstrip("/") + "/" + endpoint.lstrip("/")


class RequestsHttpClient(IHttpClient):
    """
    Thin adapter over requests.Session bound to one base URL.

    Any outcome other than a 2xx response is raised as `RequestFailed`.
    """

    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout: Optional[Tuple[float, float]] = None,
    ):
        self.base_url = base_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ) -> TransportResponse:
        url = join_url(self.base_url, endpoint)
        if data is not None:
            if isinstance(data, _RAW_BODY_TYPES):
                kwargs["data"] = data
            else:
                kwargs["json"] = data
        if self.timeout is not None:
            kwargs.setdefault("timeout", self.timeout)

        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method=method, url=url, headers=headers, **kwargs)
        except requests.RequestException as exc:
            raise RequestFailed(classify_failure(exc), original_exception=exc) from exc
        except (TypeError, ValueError) as exc:
            # Raised while preparing the request, e.g. a body json cannot encode.
            raise RequestFailed(ConfigurationError(message=str(exc)), original_exception=exc) from exc

        body = parse_body(response)
        logger.debug("%s %s -> %s", method, url, response.status_code)
        if not 200 <= response.status_code < 300:
            raise RequestFailed(ResponseError(status=response.status_code, body=body, url=response.url))

        return TransportResponse(
            status_code=response.status_code,
            data=body,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        self.session.close()
