import logging
from typing import Any, Callable, Dict, List, Union

import pytest
import requests


@pytest.fixture(autouse=True)
def clean_env_and_logging(monkeypatch, tmp_path):
    """
    Ensure tests don't leak env, logger state, or a developer's .env file.
    """

    keys = [
        "CLUSTER_AUTH_LOGS_DIR",
        "CLUSTER_AUTH_COMMAND",
        "CLUSTER_AUTH_RUN_ID",
        "CLUSTER_AUTH_VERBOSE",
        "CLUSTER_AUTH_QUIET",
        "OAUTH_MAX_RETRIES",
        "OAUTH_INITIAL_WAIT",
        "OAUTH_MAX_WAIT",
        "OAUTH_REQUEST_TIMEOUT",
        "OAUTH_VERIFY_TLS",
        "LOG_LEVEL",
        "LOG_RETENTION",
        "AWS_REGION",
        "AWS_DEFAULT_REGION",
    ]
    for k in keys:
        monkeypatch.delenv(k, raising=False)

    monkeypatch.setenv("CLUSTER_AUTH_ENV_FILE", str(tmp_path / "missing.env"))

    from cluster_auth.env import reset_env_caches
    import cluster_auth.logger.state as log_state

    reset_env_caches()
    log_state.INITIALIZED = False
    log_state.RUN_ID = None
    log_state.LOG_FILE_PATH = None

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    yield

    for h in list(root.handlers):
        root.removeHandler(h)
        if isinstance(h, logging.FileHandler):
            h.close()
    reset_env_caches()


# ------------------------------------------------------------
# HTTP fakes
# ------------------------------------------------------------


def make_response(
    status: int = 200,
    headers: Dict[str, str] | None = None,
    body: Union[str, bytes] = b"",
) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r.headers.update(headers or {})
    r._content = body.encode("utf-8") if isinstance(body, str) else body
    r._content_consumed = True
    r.encoding = "utf-8"
    return r


Route = Union[requests.Response, Exception, Callable[..., requests.Response]]


class FakeSession:
    """
    Stand-in for requests.Session.

    Routes map an exact URL to a response, an exception to raise, or a
    callable. Unrouted URLs behave like a refused connection.
    """

    def __init__(self, routes: Dict[str, Route] | None = None) -> None:
        self.routes: Dict[str, Route] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"url": url, **kwargs})
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"connection refused: {url}")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(url, **kwargs)
        return route

    def close(self) -> None:
        self.closed = True

    def urls(self) -> List[str]:
        return [c["url"] for c in self.calls]


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def response():
    return make_response
