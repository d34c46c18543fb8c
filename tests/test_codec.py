import json

import pytest

from cluster_auth.oauth.base import AuthResult
from cluster_auth.oauth.codec import (
    MISSING_API_URL,
    MISSING_CREDENTIALS,
    decode_fields,
    decode_request,
    encode_result,
    extract_json_value,
)
from cluster_auth.oauth.errors import InvalidRequest


def test_decodes_structured_json():
    req = decode_request(
        json.dumps(
            {
                "api_url": "https://api.demo.example.com:6443",
                "username": "cluster-admin",
                "password": 'p@ss"word',
            }
        )
    )

    assert req.api_url == "https://api.demo.example.com:6443"
    assert req.oauth_url is None
    assert req.username == "cluster-admin"
    assert req.password == 'p@ss"word'


def test_password_is_not_in_repr():
    req = decode_request(
        '{"api_url": "https://api.x", "username": "u", "password": "hunter2"}'
    )
    assert "hunter2" not in repr(req)


def test_falls_back_to_key_value_scan_on_malformed_input():
    text = '{"api_url": "https://api.x", "username": "admin", "password": "pw",'

    fields = decode_fields(text)

    assert fields["api_url"] == "https://api.x"
    assert fields["username"] == "admin"
    assert fields["password"] == "pw"
    assert fields["oauth_url"] == ""


def test_non_string_values_count_as_missing():
    fields = decode_fields('{"api_url": "https://api.x", "username": null, "password": 7}')
    assert fields["username"] == ""
    assert fields["password"] == ""


def test_extract_json_value_first_match_wins():
    text = '"username" : "first", "username": "second"'
    assert extract_json_value("username", text) == "first"
    assert extract_json_value("password", text) == ""


def test_missing_api_url():
    with pytest.raises(InvalidRequest) as exc:
        decode_request('{"username": "u", "password": "p"}')
    assert str(exc.value) == MISSING_API_URL


@pytest.mark.parametrize(
    "payload",
    [
        '{"api_url": "https://api.x", "username": "u"}',
        '{"api_url": "https://api.x", "password": "p"}',
        '{"api_url": "https://api.x", "username": "", "password": "p"}',
    ],
)
def test_missing_credentials(payload):
    with pytest.raises(InvalidRequest) as exc:
        decode_request(payload)
    assert str(exc.value) == MISSING_CREDENTIALS


def test_empty_input_is_an_input_error():
    with pytest.raises(InvalidRequest):
        decode_request("")


def test_oauth_url_override_is_kept():
    req = decode_request(
        '{"api_url": "https://api.x", "oauth_url": "https://oauth.x", '
        '"username": "u", "password": "p"}'
    )
    assert req.oauth_url == "https://oauth.x"


def test_encode_success_uses_string_booleans():
    line = encode_result(AuthResult.success("sha256~abc"))

    assert line.endswith("\n")
    assert line.count("\n") == 1
    assert json.loads(line) == {
        "token": "sha256~abc",
        "authenticated": "true",
        "error": "",
    }


def test_encode_failure_escapes_special_characters():
    line = encode_result(AuthResult.failure('bad "quote" and \\ backslash'))

    decoded = json.loads(line)
    assert decoded["authenticated"] == "false"
    assert decoded["token"] == ""
    assert decoded["error"] == 'bad "quote" and \\ backslash'


def test_auth_result_invariants():
    with pytest.raises(ValueError):
        AuthResult.success("")
    with pytest.raises(ValueError):
        AuthResult.failure("")
