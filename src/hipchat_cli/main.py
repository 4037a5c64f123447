"""
HipChat CLI: one flag per HipChat API v2 call.

Usage:
  hipchat --list_rooms
  hipchat --create_room --room ops --privacy private
  hipchat --send_notification --room ops --msg "deploy done" --colour green --notify
  hipchat --create_webhook --room ops --url https://example.com/hook --event room_message
  hipchat --list_emoticons --type global

Exactly one operation flag per invocation. The auth token comes from
--auth-token, then HIPCHAT_AUTH_TOKEN, then ~/.hipchat/config.json.
"""

import json

import click
from rich.markup import escape
from rich.pretty import Pretty

from hipchat_cli import __version__
from hipchat_cli.client import DEFAULT_TIMEOUT, HipChat
from hipchat_cli.config import (
    Options,
    console,
    err_console,
    handle_api_errors,
    resolve_server,
    resolve_token,
)
from hipchat_cli.operations import ECHO_MESSAGE, EMOTICON_TYPES, WEBHOOK_EVENTS, Operation


def operation_flags(fn):
    """Attach one boolean flag per Operation, in declaration order."""
    for op in reversed(list(Operation)):
        fn = click.option(f"--{op.flag}", op.flag, is_flag=True, help=op.help_text)(fn)
    return fn


def bool_option(name: str, help_text: str):
    return click.option(
        f"--{name}", name, is_flag=False, flag_value="1", default=None,
        metavar="BOOL", help=help_text,
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="hipchat")
@operation_flags
@click.option("--room", default=None, help="Room id or name")
@click.option("--name", default=None, help="New room name for --update_room (default: --room)")
@click.option("--topic", default=None, help="Room topic")
@click.option("--privacy", default=None, help="Room privacy (public or private)")
@bool_option("is_archived", "Archive the room (0/false/empty = no)")
@bool_option("is_guest_accessible", "Allow guest access (0/false/empty = no)")
@click.option("--owner_id", default=None, help="Room owner user id")
@click.option("--msg", default=None, help="Message text (or invite reason / file caption)")
@bool_option("notify", "Trigger a user notification")
@click.option("--color", default=None, help="Notification color (yellow, green, red, purple, gray, random)")
@click.option("--colour", default=None, help="Alias for --color")
@click.option("--msg_format", default=None, help="Message format (html or text)")
@click.option("--hook", default=None, help="Webhook id, or name when creating one")
@click.option("--url", default=None, help="Webhook target URL")
@click.option("--pattern", default=None, help="Webhook message regex")
@click.option("--event", type=click.Choice(WEBHOOK_EVENTS), default=None, help="Webhook event")
@click.option("--user", default=None, help="User id, email or @mention name")
@click.option("--type", type=click.Choice(EMOTICON_TYPES), default=None, help="Emoticon type filter")
@click.option("--emoticon", default=None, help="Emoticon id or shortcut")
@click.option("--file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Path of a file to share")
@click.option("--auth-token", "auth_token", default=None, help="API token (overrides HIPCHAT_AUTH_TOKEN)")
@click.option("--server", default=None, help="API base URL (default: https://api.hipchat.com)")
@click.option("--timeout", default=DEFAULT_TIMEOUT, type=float, show_default=True,
              help="Request timeout in seconds")
@click.option("--json-output", "--json", is_flag=True, help="Output as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Log requests and responses to stderr")
@handle_api_errors
def main(auth_token, server, timeout, json_output, verbose, **params):
    """Call one HipChat API v2 method and print what it returns."""
    selected = [op for op in Operation if params.pop(op.flag)]
    opts = Options.from_params(params)

    token = resolve_token(auth_token)
    op = select_operation(selected)
    op.check_required(opts)

    if op in ECHO_MESSAGE and not json_output:
        console.print(opts.msg, markup=False, highlight=False)

    with build_client(token, resolve_server(server), timeout, verbose) as client:
        with err_console.status(f"Calling {op.flag}…"):
            result = op.run(client, opts)

    print_result(result, json_output)


def select_operation(selected: list) -> Operation:
    if not selected:
        raise click.UsageError("No operation given. Pass exactly one operation flag (see --help).")
    if len(selected) > 1:
        flags = ", ".join(f"--{op.flag}" for op in selected)
        raise click.UsageError(f"Only one operation per invocation, got: {flags}.")
    return selected[0]


def build_client(token: str, server: str, timeout: float, verbose: bool) -> HipChat:
    if not verbose:
        return HipChat(token, server, timeout=timeout)
    return HipChat(
        token, server, timeout=timeout,
        on_request=_log_request, on_response=_log_response,
    )


def print_result(result, json_output: bool) -> None:
    if json_output:
        if result is not None:
            click.echo(json.dumps(result, indent=2))
        return
    if result is None:
        console.print("[green]✓ Done.[/green]")
        return
    console.print(Pretty(result))


def _log_request(request) -> None:
    err_console.log(f"[dim]→ {request.method} {escape(str(request.url))}[/dim]", highlight=False)


def _log_response(response) -> None:
    request = response.request
    err_console.log(
        f"[dim]← {response.status_code} {request.method} {escape(str(request.url))}[/dim]",
        highlight=False,
    )


if __name__ == "__main__":
    main()
