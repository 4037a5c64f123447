import json

import httpx
import pytest

from hipchat_cli.client import HipChat, HipChatError


def _client(handler, **kwargs):
    return HipChat("tok", "https://chat.example.com/", transport=httpx.MockTransport(handler), **kwargs)


def test_auth_header_and_quoted_path():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"id": 1, "name": "dev ops"})

    with _client(handler) as client:
        assert client.get_room("dev ops") == {"id": 1, "name": "dev ops"}

    request = seen[0]
    assert request.method == "GET"
    assert request.url.raw_path == b"/v2/room/dev%20ops"
    assert request.headers["Authorization"] == "Bearer tok"


def test_user_identifier_is_quoted():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(204)

    with _client(handler) as client:
        assert client.add_member("ops", "@bob") is None

    assert seen[0].method == "PUT"
    assert seen[0].url.raw_path == b"/v2/room/ops/member/%40bob"


def test_update_room_sends_json_body():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(204)

    body = {"name": "ops", "topic": "t", "privacy": "public", "is_archived": False,
            "is_guest_accessible": True, "owner": {"id": "42"}}
    with _client(handler) as client:
        assert client.update_room("ops", body) is None

    assert seen == [body]


def test_list_emoticons_query():
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json={"items": []})

    with _client(handler) as client:
        client.list_emoticons({"type": "all"})

    assert seen[0].path == "/v2/emoticon"
    assert seen[0].params["type"] == "all"


def test_error_response_raises_with_service_message():
    def handler(request):
        return httpx.Response(404, json={"error": {"code": 404, "message": "Room not found", "type": "Not Found"}})

    with _client(handler) as client:
        with pytest.raises(HipChatError) as excinfo:
            client.get_room("nope")

    assert excinfo.value.status_code == 404
    assert excinfo.value.code == 404
    assert str(excinfo.value) == "Room not found"


def test_error_response_without_json_body():
    def handler(request):
        return httpx.Response(502, text="bad gateway")

    with _client(handler) as client:
        with pytest.raises(HipChatError, match="bad gateway"):
            client.list_rooms()


def test_share_file_sends_multipart_related(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("release notes")
    seen = []

    def handler(request):
        request.read()
        seen.append(request)
        return httpx.Response(204)

    with _client(handler) as client:
        client.share_file_with_user("bob", str(path), {"message": "fyi"})

    request = seen[0]
    assert request.url.raw_path == b"/v2/user/bob/share/file"
    content_type = request.headers["Content-Type"]
    assert content_type.startswith("multipart/related; boundary=")
    boundary = content_type.split("boundary=")[1].encode()
    assert request.content.endswith(b"--" + boundary + b"--\r\n")
    assert b'Content-Disposition: attachment; name="metadata"' in request.content
    assert b'Content-Disposition: attachment; name="file"; filename="notes.txt"' in request.content
    assert b"Content-Type: text/plain" in request.content
    assert b"release notes" in request.content
    assert b'{"message": "fyi"}' in request.content


def test_event_hooks_see_each_request():
    requests, statuses = [], []

    def handler(request):
        return httpx.Response(200, json={"items": []})

    client = _client(
        handler,
        on_request=lambda r: requests.append(r.url.path),
        on_response=lambda r: statuses.append(r.status_code),
    )
    with client:
        client.list_users()

    assert requests == ["/v2/user"]
    assert statuses == [200]
