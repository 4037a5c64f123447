"""Minimal HipChat REST API v2 client.

One method per API call used by the CLI. Each takes the target identifier
(room or user, by id or name) and/or a request-shaped dict and returns the
decoded JSON body, or ``None`` when the service answers ``204 No Content``.

No retries, pagination or rate limiting: a failed request raises
:class:`HipChatError` (non-2xx status) or the underlying ``httpx`` error.
"""

import json
import mimetypes
import uuid
from pathlib import Path
from typing import Any, Callable, Mapping, Optional
from urllib.parse import quote

import httpx

from hipchat_cli import __version__

DEFAULT_TIMEOUT = 30.0


class HipChatError(RuntimeError):
    """Raised when the service rejects a request."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code

    @property
    def code(self) -> int:
        return self.status_code


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


class HipChat:
    """Authenticated HipChat API client.

    Usable as a context manager; the underlying ``httpx.Client`` is closed on
    exit.
    """

    def __init__(
        self,
        token: str,
        server: str = "https://api.hipchat.com",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
        on_request: Optional[Callable[[httpx.Request], None]] = None,
        on_response: Optional[Callable[[httpx.Response], None]] = None,
    ) -> None:
        hooks: dict[str, list] = {"request": [], "response": []}
        if on_request:
            hooks["request"].append(on_request)
        if on_response:
            hooks["response"].append(on_response)
        self._http = httpx.Client(
            base_url=server.rstrip("/") + "/v2",
            headers={
                "Authorization": f"Bearer {token}",
                "User-Agent": f"hipchat-cli/{__version__}",
            },
            timeout=timeout,
            transport=transport,
            event_hooks=hooks,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "HipChat":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self._http.request(method, path, **kwargs)
        return _handle_response(response)

    def _share_file(self, path: str, file_path: str, body: Mapping[str, Any]) -> Any:
        content, content_type = _related_body(Path(file_path), body)
        return self._request(
            "POST", path, content=content, headers={"Content-Type": content_type}
        )

    # Rooms

    def list_rooms(self) -> Any:
        return self._request("GET", "/room")

    def get_room(self, room: str) -> Any:
        return self._request("GET", f"/room/{_segment(room)}")

    def create_room(self, body: Mapping[str, Any]) -> Any:
        return self._request("POST", "/room", json=dict(body))

    def update_room(self, room: str, body: Mapping[str, Any]) -> Any:
        return self._request("PUT", f"/room/{_segment(room)}", json=dict(body))

    def delete_room(self, room: str) -> Any:
        return self._request("DELETE", f"/room/{_segment(room)}")

    def set_topic(self, room: str, body: Mapping[str, Any]) -> Any:
        return self._request("PUT", f"/room/{_segment(room)}/topic", json=dict(body))

    def send_notification(self, room: str, body: Mapping[str, Any]) -> Any:
        return self._request("POST", f"/room/{_segment(room)}/notification", json=dict(body))

    def send_message(self, room: str, body: Mapping[str, Any]) -> Any:
        return self._request("POST", f"/room/{_segment(room)}/message", json=dict(body))

    def share_file_with_room(self, room: str, file_path: str, body: Mapping[str, Any]) -> Any:
        return self._share_file(f"/room/{_segment(room)}/share/file", file_path, body)

    def view_room_history(self, room: str) -> Any:
        return self._request("GET", f"/room/{_segment(room)}/history")

    def view_recent_room_history(self, room: str) -> Any:
        return self._request("GET", f"/room/{_segment(room)}/history/latest")

    def get_room_statistics(self, room: str) -> Any:
        return self._request("GET", f"/room/{_segment(room)}/statistics")

    def list_members(self, room: str) -> Any:
        return self._request("GET", f"/room/{_segment(room)}/member")

    def add_member(self, room: str, user: str) -> Any:
        return self._request("PUT", f"/room/{_segment(room)}/member/{_segment(user)}")

    def remove_member(self, room: str, user: str) -> Any:
        return self._request("DELETE", f"/room/{_segment(room)}/member/{_segment(user)}")

    def list_participants(self, room: str) -> Any:
        return self._request("GET", f"/room/{_segment(room)}/participant")

    def invite_user(self, room: str, user: str, body: Mapping[str, Any]) -> Any:
        return self._request(
            "POST", f"/room/{_segment(room)}/invite/{_segment(user)}", json=dict(body)
        )

    # Webhooks

    def list_webhooks(self, room: str) -> Any:
        return self._request("GET", f"/room/{_segment(room)}/webhook")

    def get_webhook(self, room: str, hook: str) -> Any:
        return self._request("GET", f"/room/{_segment(room)}/webhook/{_segment(hook)}")

    def create_webhook(self, room: str, body: Mapping[str, Any]) -> Any:
        return self._request("POST", f"/room/{_segment(room)}/webhook", json=dict(body))

    def delete_webhook(self, room: str, hook: str) -> Any:
        return self._request("DELETE", f"/room/{_segment(room)}/webhook/{_segment(hook)}")

    # Users

    def list_users(self) -> Any:
        return self._request("GET", "/user")

    def view_user(self, user: str) -> Any:
        return self._request("GET", f"/user/{_segment(user)}")

    def private_message_user(self, user: str, body: Mapping[str, Any]) -> Any:
        return self._request("POST", f"/user/{_segment(user)}/message", json=dict(body))

    def view_privatechat_history(self, user: str) -> Any:
        return self._request("GET", f"/user/{_segment(user)}/history/latest")

    def share_file_with_user(self, user: str, file_path: str, body: Mapping[str, Any]) -> Any:
        return self._share_file(f"/user/{_segment(user)}/share/file", file_path, body)

    # Emoticons

    def list_emoticons(self, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self._request("GET", "/emoticon", params=dict(params or {}))

    def get_emoticon(self, emoticon: str) -> Any:
        return self._request("GET", f"/emoticon/{_segment(emoticon)}")


def _related_body(file_path: Path, body: Mapping[str, Any]) -> tuple[bytes, str]:
    """Encode a share-file upload as the ``multipart/related`` body the API expects.

    Two attachment parts: ``metadata`` (the JSON body) and ``file``.
    """
    boundary = uuid.uuid4().hex
    file_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
    parts = [
        (
            'Content-Type: application/json; charset=UTF-8\r\n'
            'Content-Disposition: attachment; name="metadata"\r\n\r\n',
            json.dumps(dict(body)).encode("utf-8"),
        ),
        (
            f'Content-Type: {file_type}\r\n'
            f'Content-Disposition: attachment; name="file"; filename="{file_path.name}"\r\n\r\n',
            file_path.read_bytes(),
        ),
    ]
    chunks = []
    for headers, payload in parts:
        chunks.append(f"--{boundary}\r\n{headers}".encode("utf-8"))
        chunks.append(payload)
        chunks.append(b"\r\n")
    chunks.append(f"--{boundary}--\r\n".encode("utf-8"))
    return b"".join(chunks), f"multipart/related; boundary={boundary}"


def _handle_response(response: httpx.Response) -> Any:
    if response.is_error:
        raise HipChatError(response.status_code, _error_message(response))
    if not response.content:
        return None
    return response.json()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text or response.reason_phrase
