import pytest

from core.config import Config, load_config

TEST_ENV = {
    "F1_API_KEY": "test-key",
    "F1_API_PASSWORD": "test-password",
    "F1_FLOWERSHOP_BASE": "https://upstream.test/api/flowershop",
    "F1_TREE_BASE": "https://upstream.test/api/tree",
    "F1_CART_BASE": "https://upstream.test/api/cart/",
    "ALLOWED_ORIGINS": "http://localhost:3000, https://shop.example.com",
}

# base64("test-key:test-password")
EXPECTED_AUTH = "Basic dGVzdC1rZXk6dGVzdC1wYXNzd29yZA=="


class RecordingLogger:
    """RequestLogger that keeps every call in memory."""

    def __init__(self):
        self.requests = []
        self.responses = []
        self.errors = []
        self.request_ids = []
        self.response_ids = []
        self.error_ids = []

    def log_request(self, request_id, api, method, path, target_url):
        self.requests.append((api, method, path, target_url))
        self.request_ids.append(request_id)

    def log_response(self, request_id, api, status, hops):
        self.responses.append((api, status, hops))
        self.response_ids.append(request_id)

    def log_error(self, route, status, message, *, request_id=None):
        self.errors.append((route, status, message))
        self.error_ids.append(request_id)


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    """Keep request and CLI logs out of the working directory."""
    from ui import log_utils

    monkeypatch.setattr(log_utils, "LOG_ROOT", tmp_path / "logs")
    monkeypatch.setattr(log_utils, "CLI_LOG_FILE", tmp_path / "logs" / "proxy.log")
    return tmp_path / "logs"


@pytest.fixture
def test_env():
    return dict(TEST_ENV)


@pytest.fixture
def config(test_env) -> Config:
    return load_config(test_env)


@pytest.fixture
def config_without_credentials(test_env) -> Config:
    test_env.pop("F1_API_PASSWORD")
    return load_config(test_env)


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def expected_auth():
    return EXPECTED_AUTH
