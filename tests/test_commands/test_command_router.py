"""Tests for the slash command HTTP route."""

from conftest import COMMAND_TOKEN


def _form(text: str, token: str = COMMAND_TOKEN, channel_id: str = "existingChannelId") -> dict:
    return {
        "token": token,
        "channel_id": channel_id,
        "command": "/rollbar",
        "text": text,
        "user_name": "daniel",
    }


def test_command_with_form_token(client, host):
    host.add_user("daniel-id", "daniel")

    response = client.post("/command", data=_form("notify @daniel"))

    assert response.status_code == 200
    assert response.json() == {
        "response_type": "ephemeral",
        "text": "Users notified on each Rollbar posted to this channel: @daniel",
        "username": "Rollbar",
    }
    assert host.kv["existingChannelId"] == b'{"daniel": true}'


def test_command_with_authorization_header(client):
    response = client.post(
        "/command",
        data=_form("list", token=""),
        headers={"Authorization": f"Token {COMMAND_TOKEN}"},
    )

    assert response.status_code == 200
    assert response.json()["text"] == "Users notified on each Rollbar posted to this channel: None"


def test_command_bad_token_is_401(client):
    response = client.post("/command", data=_form("list", token="wrong"))

    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthenticated."}


def test_command_without_configured_token_is_401(make_client):
    client = make_client(command_token="")

    response = client.post("/command", data=_form("list", token=""))

    assert response.status_code == 401


def test_command_usage_error_is_still_200(client):
    response = client.post("/command", data=_form("bogus"))

    assert response.status_code == 200
    assert response.json()["text"] == "Usage: `/rollbar (notify|remove|list) @username`"


def test_command_non_utf8_body_is_401(client):
    response = client.post(
        "/command",
        content=b"\xff\xfe",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert response.status_code == 401


def test_command_non_utf8_body_with_header_token_gets_usage(client):
    response = client.post(
        "/command",
        content=b"\xff\xfe",
        headers={
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": f"Token {COMMAND_TOKEN}",
        },
    )

    assert response.status_code == 200
    assert response.json()["text"] == "Usage: `/rollbar (notify|remove|list) @username`"
