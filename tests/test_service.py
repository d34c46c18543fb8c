import io
import json

import pytest

from cluster_auth.oauth.base import AuthRequest, RetryPolicy
from cluster_auth.oauth.discovery import WELL_KNOWN_PATH
from cluster_auth.oauth.service import get_token, run
from cluster_auth.oauth.token import AUTHORIZE_PATH

API = "https://api.demo.example.com:6443"
OAUTH = "https://oauth-openshift.apps.demo.example.com"
AUTHORIZE = OAUTH + AUTHORIZE_PATH
LOCATION = OAUTH + "/oauth/token/implicit#access_token=sha256~TOKEN&expires_in=86400"

POLICY = RetryPolicy(max_retries=6, initial_wait=10, max_wait=30)
INPUT = json.dumps({"api_url": API, "username": "admin", "password": "secret"})


def _routes(response, authorize):
    return {
        API + WELL_KNOWN_PATH: response(200, body=json.dumps({"issuer": OAUTH})),
        OAUTH + "/healthz": response(200, body="ok"),
        AUTHORIZE: authorize,
    }


def _run(session, text=INPUT, policy=POLICY):
    sleeps = []
    out = io.StringIO()
    code = run(io.StringIO(text), out, policy, sleep=sleeps.append, session=session)
    lines = out.getvalue().splitlines()
    assert code == 0
    assert len(lines) == 1
    return json.loads(lines[0]), sleeps


def test_success(fake_session, response):
    session = fake_session(_routes(response, response(302, {"Location": LOCATION})))

    result, sleeps = _run(session)

    assert result == {"token": "sha256~TOKEN", "authenticated": "true", "error": ""}
    assert sleeps == []


@pytest.mark.parametrize(
    "status, message",
    [(401, "invalid credentials"), (403, "access forbidden")],
)
def test_terminal_status_single_attempt(fake_session, response, status, message):
    session = fake_session(_routes(response, response(status)))

    result, sleeps = _run(session)

    assert result == {"token": "", "authenticated": "false", "error": message}
    assert sleeps == []
    assert session.urls().count(AUTHORIZE) == 1


def test_persistent_connection_refused_follows_backoff(fake_session):
    session = fake_session()

    result, sleeps = _run(session)

    assert sleeps == [10, 20, 30, 30, 30]
    assert result["authenticated"] == "false"
    assert result["token"] == ""
    assert "oauth server not reachable after 6 attempts" in result["error"]
    assert "re-run terraform apply" in result["error"]


def test_persistent_auth_failure_message(fake_session, response):
    session = fake_session(_routes(response, response(500)))

    result, sleeps = _run(session, policy=RetryPolicy(3, 1, 2))

    assert sleeps == [1, 2]
    assert result["error"].startswith("authentication failed after 3 attempts")
    assert "IDP may still be initializing" in result["error"]


def test_missing_credentials_makes_no_network_calls(fake_session):
    session = fake_session()

    result, sleeps = _run(session, text=json.dumps({"api_url": API, "username": "admin"}))

    assert result == {
        "token": "",
        "authenticated": "false",
        "error": "username and password are required",
    }
    assert session.calls == []
    assert sleeps == []


def test_malformed_input_still_yields_json(fake_session, response):
    session = fake_session(_routes(response, response(302, {"Location": LOCATION})))
    text = '{"api_url": "%s", "username": "admin", "password": "secret"' % API

    result, _ = _run(session, text=text)

    assert result["authenticated"] == "true"
    assert result["token"] == "sha256~TOKEN"


def test_garbage_input_reports_missing_api_url(fake_session):
    result, _ = _run(fake_session(), text="not json at all")
    assert result["error"] == "api_url not provided in input"


def test_undecodable_stdin_reports_decode_error(fake_session):
    session = fake_session()
    stdin = io.TextIOWrapper(io.BytesIO(b'{"api_url": "\xff\xfe"}'), encoding="utf-8")
    out = io.StringIO()

    assert run(stdin, out, POLICY, sleep=lambda s: None, session=session) == 0

    result = json.loads(out.getvalue())
    assert result["authenticated"] == "false"
    assert result["error"].startswith("could not decode input:")
    assert session.calls == []


def test_unexpected_error_is_converted(fake_session):
    def explode(url, **kwargs):
        raise RuntimeError("boom")

    session = fake_session({API + WELL_KNOWN_PATH: explode})

    result, _ = _run(session)

    assert result["authenticated"] == "false"
    assert result["error"] == "unexpected error: boom"


def test_get_token_uses_override_and_keeps_caller_session(fake_session, response):
    override = "https://oauth.demo.example.com"
    session = fake_session(
        {
            override + "/healthz": response(200),
            override + AUTHORIZE_PATH: response(302, {"Location": LOCATION}),
        }
    )
    request = AuthRequest(
        api_url=API, username="admin", password="secret", oauth_url=override
    )

    result = get_token(request, POLICY, session=session, sleep=lambda s: None)

    assert result.authenticated
    assert result.token == "sha256~TOKEN"
    assert API + WELL_KNOWN_PATH not in session.urls()
    assert session.closed is False


def test_repeated_runs_classify_the_same(fake_session, response):
    first, _ = _run(fake_session(_routes(response, response(401))))
    second, _ = _run(fake_session(_routes(response, response(401))))
    assert first == second
