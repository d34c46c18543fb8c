import base64

import requests

from cluster_auth.oauth.base import FailureReason, OutcomeKind
from cluster_auth.oauth.token import (
    AUTHORIZE_PATH,
    TokenRetriever,
    basic_auth_header,
    classify_response,
    extract_token,
)

OAUTH = "https://oauth-openshift.apps.demo.example.com"
AUTHORIZE = OAUTH + AUTHORIZE_PATH
IMPLICIT = (
    OAUTH
    + "/oauth/token/implicit#access_token=sha256~abc%2Bdef&expires_in=86400"
    + "&scope=user%3Afull&token_type=Bearer"
)


def test_basic_auth_header():
    header = basic_auth_header("kubeadmin", "p:ss")
    assert header.startswith("Basic ")
    assert base64.b64decode(header[len("Basic "):]) == b"kubeadmin:p:ss"


def test_extract_token_from_location_fragment():
    assert extract_token(IMPLICIT) == "sha256~abc+def"
    assert extract_token(OAUTH + "/?access_token=tok\r") == "tok"
    assert extract_token(OAUTH + "/login") is None
    assert extract_token("") is None


def test_classify_success():
    outcome = classify_response(302, {"Location": IMPLICIT})
    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.token == "sha256~abc+def"


def test_classify_terminal_statuses():
    assert classify_response(401, {}).reason is FailureReason.INVALID_CREDENTIALS
    assert classify_response(401, {}).kind is OutcomeKind.TERMINAL
    assert classify_response(403, {}).reason is FailureReason.ACCESS_FORBIDDEN
    assert classify_response(403, {}).kind is OutcomeKind.TERMINAL


def test_classify_everything_else_is_retryable():
    for status in (200, 302, 500, 503):
        outcome = classify_response(status, {"Location": OAUTH + "/login"})
        assert outcome.kind is OutcomeKind.RETRYABLE
        assert outcome.reason is FailureReason.AUTH_FAILED


def test_retriever_does_not_follow_redirects(fake_session, response):
    session = fake_session(
        {
            OAUTH + "/healthz": response(200, body="ok"),
            AUTHORIZE: response(302, headers={"Location": IMPLICIT}),
        }
    )

    outcome = TokenRetriever(session, OAUTH, "admin", "secret")()

    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.token == "sha256~abc+def"

    authorize_call = session.calls[-1]
    assert authorize_call["url"] == AUTHORIZE
    assert authorize_call["allow_redirects"] is False
    assert authorize_call["headers"]["X-CSRF-Token"] == "1"
    assert authorize_call["headers"]["Authorization"] == basic_auth_header(
        "admin", "secret"
    )


def test_retriever_reports_unreachable_server(fake_session):
    session = fake_session()

    outcome = TokenRetriever(session, OAUTH + "/", "admin", "secret")()

    assert outcome.kind is OutcomeKind.RETRYABLE
    assert outcome.reason is FailureReason.OAUTH_NOT_REACHABLE
    assert session.urls() == [OAUTH + "/healthz", OAUTH]


def test_retriever_transport_error_on_authorize_is_retryable(fake_session, response):
    session = fake_session(
        {
            OAUTH: response(200),
            AUTHORIZE: requests.ConnectionError("reset by peer"),
        }
    )

    outcome = TokenRetriever(session, OAUTH, "admin", "secret")()

    assert outcome.kind is OutcomeKind.RETRYABLE
    assert outcome.reason is FailureReason.AUTH_FAILED
