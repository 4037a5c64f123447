"""Operation table: every API call the CLI exposes, its required flags and handler."""

from enum import Enum
from typing import Any, Callable

import click

from hipchat_cli.client import HipChat
from hipchat_cli.config import Options

WEBHOOK_EVENTS = (
    "room_message",
    "room_notification",
    "room_exit",
    "room_enter",
    "room_topic_change",
)
EMOTICON_TYPES = ("global", "group", "all")


class Operation(Enum):
    """A single remote action. Value: (flag name, required options, help)."""

    LIST_ROOMS = ("list_rooms", (), "List all rooms")
    GET_ROOM = ("get_room", ("room",), "Show a room")
    CREATE_ROOM = ("create_room", ("room",), "Create a room named --room")
    UPDATE_ROOM = (
        "update_room",
        ("room", "topic", "privacy", "owner_id"),
        "Update a room's name, topic, privacy, archive/guest flags and owner",
    )
    DELETE_ROOM = ("delete_room", ("room",), "Delete a room")
    SET_TOPIC = ("set_topic", ("room", "topic"), "Set a room topic")
    SEND_NOTIFICATION = ("send_notification", ("room", "msg"), "Send a room notification")
    SEND_MESSAGE = ("send_message", ("room", "msg"), "Send a room message as the token owner")
    SHARE_FILE_ROOM = ("share_file_room", ("room", "file"), "Share a file with a room")
    ROOM_HISTORY = ("room_history", ("room",), "Show room history")
    LATEST_HISTORY = ("latest_history", ("room",), "Show the latest room history")
    ROOM_STATISTICS = ("room_statistics", ("room",), "Show room statistics")
    LIST_MEMBERS = ("list_members", ("room",), "List members of a private room")
    ADD_MEMBER = ("add_member", ("room", "user"), "Add a member to a private room")
    REMOVE_MEMBER = ("remove_member", ("room", "user"), "Remove a member from a private room")
    LIST_PARTICIPANTS = ("list_participants", ("room",), "List users present in a room")
    INVITE_USER = ("invite_user", ("room", "user"), "Invite a user to a room (--msg is the reason)")
    LIST_WEBHOOKS = ("list_webhooks", ("room",), "List a room's webhooks")
    GET_WEBHOOK = ("get_webhook", ("room", "hook"), "Show a webhook")
    CREATE_WEBHOOK = ("create_webhook", ("room", "url", "event"), "Create a room webhook")
    DELETE_WEBHOOK = ("delete_webhook", ("room", "hook"), "Delete a webhook")
    LIST_USERS = ("list_users", (), "List all users")
    GET_USER = ("get_user", ("user",), "Show a user")
    PRIVATE_MESSAGE = ("private_message", ("user", "msg"), "Send a private message to a user")
    PRIVATE_HISTORY = ("private_history", ("user",), "Show private chat history with a user")
    SHARE_FILE_USER = ("share_file_user", ("user", "file"), "Share a file with a user")
    LIST_EMOTICONS = ("list_emoticons", (), "List emoticons (filter with --type)")
    GET_EMOTICON = ("get_emoticon", ("emoticon",), "Show an emoticon")

    def __init__(self, flag: str, required: tuple, help_text: str):
        self.flag = flag
        self.required = required
        self.help_text = help_text

    def check_required(self, opts: Options) -> None:
        """Raise a usage error naming the first required flag that is unset."""
        for key in self.required:
            if not getattr(opts, key):
                raise click.UsageError(f"Missing option '--{key}' (required by --{self.flag}).")

    def run(self, client: HipChat, opts: Options) -> Any:
        return HANDLERS[self](client, opts)


Handler = Callable[[HipChat, Options], Any]
HANDLERS: dict[Operation, Handler] = {}

# Operations whose outgoing message is printed before the result.
ECHO_MESSAGE = frozenset({Operation.SEND_MESSAGE})


def handles(op: Operation):
    def register(fn: Handler) -> Handler:
        if op in HANDLERS:
            raise RuntimeError(f"Duplicate handler for {op.name}")
        HANDLERS[op] = fn
        return fn

    return register


def _compact(body: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in body.items() if v is not None}


# Rooms

@handles(Operation.LIST_ROOMS)
def list_rooms(client, opts):
    return client.list_rooms()


@handles(Operation.GET_ROOM)
def get_room(client, opts):
    return client.get_room(opts.room)


@handles(Operation.CREATE_ROOM)
def create_room(client, opts):
    body = _compact({
        "name": opts.room,
        "topic": opts.topic,
        "privacy": opts.privacy,
        "owner_user_id": opts.owner_id,
    })
    body["guest_access"] = opts.is_guest_accessible
    return client.create_room(body)


@handles(Operation.UPDATE_ROOM)
def update_room(client, opts):
    body = {
        "name": opts.name or opts.room,
        "topic": opts.topic,
        "privacy": opts.privacy,
        "is_archived": opts.is_archived,
        "is_guest_accessible": opts.is_guest_accessible,
        "owner": {"id": opts.owner_id},
    }
    return client.update_room(opts.room, body)


@handles(Operation.DELETE_ROOM)
def delete_room(client, opts):
    return client.delete_room(opts.room)


@handles(Operation.SET_TOPIC)
def set_topic(client, opts):
    return client.set_topic(opts.room, {"topic": opts.topic})


@handles(Operation.SEND_NOTIFICATION)
def send_notification(client, opts):
    body = _compact({
        "message": opts.msg,
        "color": opts.color,
        "notify": opts.notify,
        "message_format": opts.msg_format,
    })
    return client.send_notification(opts.room, body)


@handles(Operation.SEND_MESSAGE)
def send_message(client, opts):
    return client.send_message(opts.room, {"message": opts.msg})


@handles(Operation.SHARE_FILE_ROOM)
def share_file_room(client, opts):
    return client.share_file_with_room(opts.room, opts.file, _compact({"message": opts.msg}))


@handles(Operation.ROOM_HISTORY)
def room_history(client, opts):
    return client.view_room_history(opts.room)


@handles(Operation.LATEST_HISTORY)
def latest_history(client, opts):
    return client.view_recent_room_history(opts.room)


@handles(Operation.ROOM_STATISTICS)
def room_statistics(client, opts):
    return client.get_room_statistics(opts.room)


@handles(Operation.LIST_MEMBERS)
def list_members(client, opts):
    return client.list_members(opts.room)


@handles(Operation.ADD_MEMBER)
def add_member(client, opts):
    return client.add_member(opts.room, opts.user)


@handles(Operation.REMOVE_MEMBER)
def remove_member(client, opts):
    return client.remove_member(opts.room, opts.user)


@handles(Operation.LIST_PARTICIPANTS)
def list_participants(client, opts):
    return client.list_participants(opts.room)


@handles(Operation.INVITE_USER)
def invite_user(client, opts):
    return client.invite_user(opts.room, opts.user, _compact({"reason": opts.msg}))


# Webhooks

@handles(Operation.LIST_WEBHOOKS)
def list_webhooks(client, opts):
    return client.list_webhooks(opts.room)


@handles(Operation.GET_WEBHOOK)
def get_webhook(client, opts):
    return client.get_webhook(opts.room, opts.hook)


@handles(Operation.CREATE_WEBHOOK)
def create_webhook(client, opts):
    body = _compact({
        "url": opts.url,
        "event": opts.event,
        "pattern": opts.pattern,
        "name": opts.hook,
    })
    return client.create_webhook(opts.room, body)


@handles(Operation.DELETE_WEBHOOK)
def delete_webhook(client, opts):
    return client.delete_webhook(opts.room, opts.hook)


# Users

@handles(Operation.LIST_USERS)
def list_users(client, opts):
    return client.list_users()


@handles(Operation.GET_USER)
def get_user(client, opts):
    return client.view_user(opts.user)


@handles(Operation.PRIVATE_MESSAGE)
def private_message(client, opts):
    body = _compact({
        "message": opts.msg,
        "notify": opts.notify,
        "message_format": opts.msg_format,
    })
    return client.private_message_user(opts.user, body)


@handles(Operation.PRIVATE_HISTORY)
def private_history(client, opts):
    return client.view_privatechat_history(opts.user)


@handles(Operation.SHARE_FILE_USER)
def share_file_user(client, opts):
    return client.share_file_with_user(opts.user, opts.file, _compact({"message": opts.msg}))


# Emoticons

@handles(Operation.LIST_EMOTICONS)
def list_emoticons(client, opts):
    params = {}
    if opts.type:
        params["type"] = opts.type
    return client.list_emoticons(params)


@handles(Operation.GET_EMOTICON)
def get_emoticon(client, opts):
    return client.get_emoticon(opts.emoticon)


_unhandled = [op.name for op in Operation if op not in HANDLERS]
if _unhandled:
    raise RuntimeError(f"Operations without a handler: {', '.join(_unhandled)}")
