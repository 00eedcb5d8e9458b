import pytest

from morphsync_request.config import ClientConfig
from morphsync_request.http.request_client import RequestClient


class RecordingSink:
    def __init__(self):
        self.writes = []

    def write(self, message, channel):
        self.writes.append((message, channel))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_client(sink):
    def _make(transport, **config_overrides):
        config = ClientConfig(**config_overrides)
        return RequestClient("https://api.example.com", transport=transport, log_sink=sink, config=config)

    return _make
