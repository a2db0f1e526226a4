"""
Dispatcher tests: request shape and HTTP status to error mapping.

requests is mocked through the client's session; no network calls.
"""

from unittest.mock import MagicMock, Mock

import pytest
import requests

from usesend_transport.client import UsesendClient
from usesend_transport.config import Settings
from usesend_transport.envelope import build_envelope
from usesend_transport.errors import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    ErrorKind,
    NetworkError,
    RateLimitError,
    ServerError,
)


def _settings(**overrides) -> Settings:
    options = {"api_key": "us_test_key", "api_url": "https://mail.example.test/"}
    options.update(overrides)
    return Settings.from_options(**options)


def _response(status: int, json_body=None, text: str = "") -> Mock:
    response = Mock()
    response.status_code = status
    if json_body is None:
        response.json.side_effect = ValueError("no json")
        response.text = text
    else:
        response.json.return_value = json_body
        response.text = text or str(json_body)
    return response


def _client(response=None, side_effect=None):
    session = MagicMock(spec=requests.Session)
    if side_effect is not None:
        session.post.side_effect = side_effect
    else:
        session.post.return_value = response
    return UsesendClient(_settings(), session=session), session


def _request():
    return build_envelope(
        {
            "from": "Sender <a@x.com>",
            "to": "b@y.com",
            "cc": ["c@z.com"],
            "subject": "s",
            "html": "<p>hi</p>",
            "attachments": [{"filename": "f.txt", "content": "hi"}],
        }
    )


# ---------------------------------------------------------------------------
# Success
# ---------------------------------------------------------------------------

def test_success_posts_json_with_bearer_key():
    client, session = _client(_response(200, {"id": "msg_123"}))
    result = client.send_email(_request())

    session.post.assert_called_once()
    args, kwargs = session.post.call_args
    assert args[0] == "https://mail.example.test/api/v1/emails"
    assert kwargs["headers"]["Authorization"] == "Bearer us_test_key"
    assert kwargs["timeout"] == 30.0
    body = kwargs["json"]
    assert body["from"] == "Sender <a@x.com>"
    assert body["to"] == ["b@y.com"]
    assert body["text"] == "hi"
    assert body["attachments"] == [{"filename": "f.txt", "content": "aGk="}]

    assert result.message_id == "msg_123"
    assert result.envelope == {"from": "a@x.com", "to": ["b@y.com"]}
    assert result.accepted == ["b@y.com", "c@z.com"]
    assert result.response == {"id": "msg_123"}


def test_email_id_key_is_understood():
    client, _ = _client(_response(201, {"emailId": "em_9"}))
    assert client.send_email(_request()).message_id == "em_9"


def test_success_without_id_returns_none():
    client, _ = _client(_response(200, {"ok": True}))
    assert client.send_email(_request()).message_id is None


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "status, error_type, kind",
    [
        (400, ApiError, ErrorKind.VALIDATION),
        (401, AuthenticationError, ErrorKind.AUTHENTICATION),
        (403, AuthorizationError, ErrorKind.AUTHORIZATION),
        (429, RateLimitError, ErrorKind.RATE_LIMIT),
        (500, ServerError, ErrorKind.SERVER),
        (503, ServerError, ErrorKind.SERVER),
        (404, ApiError, ErrorKind.VALIDATION),
    ],
)
def test_status_maps_to_error_kind(status, error_type, kind):
    client, _ = _client(_response(status, {"code": "X", "message": "detail"}))
    with pytest.raises(error_type) as exc_info:
        client.send_email(_request())
    error = exc_info.value
    assert error.kind is kind
    assert error.status_code == status
    assert error.response_body == {"code": "X", "message": "detail"}


@pytest.mark.parametrize("body", [None, {"message": "bad key"}, {"error": {"message": "nope"}}])
def test_401_is_authentication_regardless_of_body(body):
    client, _ = _client(_response(401, body, text="plain text"))
    with pytest.raises(AuthenticationError) as exc_info:
        client.send_email(_request())
    assert "API key" in str(exc_info.value)


def test_400_includes_api_detail_and_hint():
    client, _ = _client(_response(400, {"code": "BAD_REQUEST", "message": "to is required"}))
    with pytest.raises(ApiError) as exc_info:
        client.send_email(_request())
    message = str(exc_info.value)
    assert "to is required" in message
    assert "missing fields" in message


def test_nested_error_message_is_extracted():
    client, _ = _client(_response(403, {"error": {"code": "FORBIDDEN", "message": "domain not verified"}}))
    with pytest.raises(AuthorizationError, match="domain not verified"):
        client.send_email(_request())


def test_429_hints_to_back_off():
    client, _ = _client(_response(429, {"message": "slow down"}))
    with pytest.raises(RateLimitError, match="retry later"):
        client.send_email(_request())


def test_5xx_surfaces_body_verbatim():
    client, _ = _client(_response(502, None, text="<html>Bad Gateway</html>"))
    with pytest.raises(ServerError) as exc_info:
        client.send_email(_request())
    assert "<html>Bad Gateway</html>" in str(exc_info.value)
    assert exc_info.value.response_body == "<html>Bad Gateway</html>"


def test_network_failure_is_network_error():
    boom = requests.ConnectionError("Name or service not known")
    client, session = _client(side_effect=boom)
    with pytest.raises(NetworkError, match="Name or service not known") as exc_info:
        client.send_email(_request())
    assert exc_info.value.kind is ErrorKind.NETWORK
    assert exc_info.value.__cause__ is boom
    assert session.post.call_count == 1


def test_timeout_is_network_error():
    client, _ = _client(side_effect=requests.Timeout("read timed out"))
    with pytest.raises(NetworkError, match="read timed out"):
        client.send_email(_request())
