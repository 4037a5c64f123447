"""Shared configuration, option table and error helpers."""

import functools
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape

CONFIG_DIR = Path.home() / ".hipchat"
CONFIG_FILE = CONFIG_DIR / "config.json"

TOKEN_ENV = "HIPCHAT_AUTH_TOKEN"
SERVER_ENV = "HIPCHAT_SERVER"
DEFAULT_SERVER = "https://api.hipchat.com"

FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})

console = Console()
err_console = Console(stderr=True)


@dataclass(frozen=True)
class Options:
    """Parsed flag values for a single invocation."""

    room: Optional[str] = None
    name: Optional[str] = None
    topic: Optional[str] = None
    privacy: Optional[str] = None
    is_archived: bool = False
    is_guest_accessible: bool = False
    owner_id: Optional[str] = None
    msg: Optional[str] = None
    notify: bool = False
    color: Optional[str] = None
    msg_format: Optional[str] = None
    hook: Optional[str] = None
    url: Optional[str] = None
    pattern: Optional[str] = None
    event: Optional[str] = None
    user: Optional[str] = None
    type: Optional[str] = None
    emoticon: Optional[str] = None
    file: Optional[str] = None

    @classmethod
    def from_params(cls, params: dict[str, Any]) -> "Options":
        """Build the table from raw click values, coercing booleans and colour."""
        return cls(
            room=params.get("room"),
            name=params.get("name"),
            topic=params.get("topic"),
            privacy=params.get("privacy"),
            is_archived=to_bool(params.get("is_archived")),
            is_guest_accessible=to_bool(params.get("is_guest_accessible")),
            owner_id=params.get("owner_id"),
            msg=params.get("msg"),
            notify=to_bool(params.get("notify")),
            color=params.get("color") or params.get("colour"),
            msg_format=params.get("msg_format"),
            hook=params.get("hook"),
            url=params.get("url"),
            pattern=params.get("pattern"),
            event=params.get("event"),
            user=params.get("user"),
            type=params.get("type"),
            emoticon=params.get("emoticon"),
            file=params.get("file"),
        )


def to_bool(value: Optional[str]) -> bool:
    """Collapse a flag string to a bool; unset, empty and ``0`` are false."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return value.strip().lower() not in FALSE_STRINGS


def load_config() -> dict[str, Any]:
    try:
        cfg = json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
    return cfg if isinstance(cfg, dict) else {}


def resolve_token(flag_value: Optional[str]) -> str:
    """Return the auth token from the flag, the environment or the config file."""
    token = flag_value or os.environ.get(TOKEN_ENV) or load_config().get("auth_token")
    if not token:
        raise click.UsageError(
            f"No auth token. Pass --auth-token or set {TOKEN_ENV}."
        )
    return token


def resolve_server(flag_value: Optional[str]) -> str:
    return (
        flag_value
        or os.environ.get(SERVER_ENV)
        or load_config().get("server")
        or DEFAULT_SERVER
    )


def handle_api_errors(fn):
    """Decorator that turns client and transport errors into a clean exit."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except (SystemExit, click.ClickException, click.exceptions.Exit):
            raise
        except KeyboardInterrupt:
            err_console.print("\n[dim]Interrupted.[/dim]")
            raise SystemExit(130)
        except Exception as exc:
            _print_api_error(exc)
            raise SystemExit(1)

    return wrapper


def _print_api_error(exc: Exception) -> None:
    code = getattr(exc, "code", None)
    message = str(exc)
    if code:
        err_console.print(f"[red]Error ({code}):[/red] {escape(message)}")
    else:
        err_console.print(f"[red]Error:[/red] {escape(message)}")
