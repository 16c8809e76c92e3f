"""Tests for the Rollbar webhook route."""

import json

from conftest import BOT_USER_ID, SECRET, load_fixture

from matterbar.errors import HostAPIError


def _notify(client, body: bytes, **params):
    query = {"auth": SECRET, **params}
    return client.post("/notify", params=query, content=body)


# -- routing and auth --


def test_unknown_path_is_404(client):
    response = client.post("/not_found", params={"auth": SECRET}, content=b"{}")
    assert response.status_code == 404


def test_get_is_405(client):
    response = client.get("/notify", params={"auth": SECRET})
    assert response.status_code == 405


def test_missing_auth_is_401(client, host):
    response = client.post("/notify", content=load_fixture("new_item.json"))

    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthenticated."}
    assert host.posts == []


def test_wrong_auth_is_401(client):
    response = client.post("/notify", params={"auth": "wrong"}, content=b"{}")
    assert response.status_code == 401


def test_unconfigured_secret_rejects_everything(make_client):
    client = make_client(secret="", default_team="existingTeam", default_channel="existingChannel")

    response = client.post("/notify", params={"auth": ""}, content=load_fixture("new_item.json"))

    assert response.status_code == 401


# -- channel resolution --


def test_missing_team_is_400(make_client):
    client = make_client()

    response = _notify(client, load_fixture("new_item.json"), channel="existingChannel")

    assert response.status_code == 400
    assert response.json() == {"detail": "Missing 'team' query parameter."}


def test_missing_channel_is_400(make_client):
    client = make_client()

    response = _notify(client, load_fixture("new_item.json"), team="existingTeam")

    assert response.status_code == 400
    assert response.json() == {"detail": "Missing 'channel' query parameter."}


def test_unknown_team_is_400(client):
    response = _notify(client, load_fixture("new_item.json"), team="nope")

    assert response.status_code == 400
    assert response.json() == {"detail": "Team 'nope' does not exist."}


def test_unknown_channel_is_400(client):
    response = _notify(client, load_fixture("new_item.json"), channel="nope")

    assert response.status_code == 400
    assert response.json() == {"detail": "Channel 'nope' does not exist."}


def test_query_team_and_channel_override_defaults(client, host):
    host.add_team("otherTeamId", "otherTeam")
    host.add_channel("otherTeamId", "otherChannelId", "alerts")

    response = _notify(client, load_fixture("new_item.json"), team="otherTeam", channel="alerts")

    assert response.status_code == 200
    assert host.posts[0].channel_id == "otherChannelId"


def test_query_channel_in_default_team(client, host):
    host.add_channel("existingTeamId", "secondChannelId", "second")

    response = _notify(client, load_fixture("new_item.json"), channel="second")

    assert response.status_code == 200
    assert host.posts[0].channel_id == "secondChannelId"


def test_explicit_names_without_defaults(make_client, host):
    client = make_client()

    response = _notify(
        client, load_fixture("new_item.json"), team="existingTeam", channel="existingChannel"
    )

    assert response.status_code == 200
    assert host.posts[0].channel_id == "existingChannelId"


# -- payload handling --


def test_invalid_json_is_400(client, host):
    response = _notify(client, b"")

    assert response.status_code == 400
    assert "Invalid JSON" in response.json()["detail"]
    assert host.posts == []


def test_missing_envelope_is_400(client):
    response = _notify(client, b'{"data": {}}')
    assert response.status_code == 400


def test_post_failure_is_500(client, host):
    host.post_error = HostAPIError("You do not have the appropriate permissions.")

    response = _notify(client, load_fixture("new_item.json"))

    assert response.status_code == 500
    assert response.json() == {"detail": "You do not have the appropriate permissions."}


def test_new_item_creates_attachment_post(client, host):
    host.kv["existingChannelId"] = b'{"daniel": true, "eric": true}'

    response = _notify(client, load_fixture("new_item.json"))

    assert response.status_code == 200
    assert response.content == b""
    assert len(host.posts) == 1

    post = host.posts[0]
    assert post.channel_id == "existingChannelId"
    assert post.user_id == BOT_USER_ID
    assert post.type == "slack_attachment"
    assert post.props["from_webhook"] == "true"
    assert post.props["use_user_icon"] == "true"

    attachment = post.props["attachments"][0]
    assert attachment["title"] == "New Error"
    assert attachment["color"] == "#ff0000"
    assert attachment["pretext"] == "@daniel, @eric"
    assert attachment["text"] == (
        "```\nTypeError: 'NoneType' object has no attribute '__getitem__'\n```"
    )


def test_every_fixture_posts(client, host):
    names = [
        "new_item.json",
        "every_occurrence.json",
        "high_occurrence_rate.json",
        "ten_nth.json",
        "resolved_item.json",
        "deploy.json",
        "test.json",
    ]
    for name in names:
        response = _notify(client, load_fixture(name))
        assert response.status_code == 200, name

    assert len(host.posts) == len(names)


def test_test_event_posts_plain_message(client, host):
    response = _notify(client, load_fixture("test.json"))

    assert response.status_code == 200
    post = host.posts[0]
    assert post.message == "Test message from Rollbar"
    assert post.type == ""
    assert "attachments" not in post.props
    assert post.props["from_webhook"] == "true"


def test_corrupt_mentions_still_post(client, host):
    host.kv["existingChannelId"] = b"{broken"

    response = _notify(client, load_fixture("new_item.json"))

    assert response.status_code == 200
    assert "pretext" not in host.posts[0].props["attachments"][0]


def test_mention_store_error_still_posts(client, host):
    host.kv_get_error = HostAPIError("store unavailable")

    response = _notify(client, load_fixture("deploy.json"))

    assert response.status_code == 200
    assert len(host.posts) == 1


def test_unknown_event_name_posts_level_title(client, host):
    body = b'{"event_name": "brand_new", "data": {"item": {"last_occurrence": {"level": "info"}}}}'

    response = _notify(client, body)

    assert response.status_code == 200
    assert host.posts[0].props["attachments"][0]["title"] == "Info"


def test_deploy_with_millisecond_finish_time_posts(client, host):
    body = json.loads(load_fixture("deploy.json"))
    body["data"]["deploy"]["finish_time"] = 10**15

    response = _notify(client, json.dumps(body).encode())

    assert response.status_code == 200
    attachment = host.posts[0].props["attachments"][0]
    assert attachment["text"].startswith(f"`{10**15}` **unknown user** deployed")
