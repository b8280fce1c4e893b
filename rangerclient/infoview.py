"""Text views of the details the server reports about a user."""

from __future__ import annotations

import time
from typing import Any, Iterable

from .users import PremiumUserInfo, UserInfo

WITHHELD = "(Withheld)"
OFFLINE_ROOM = "Offline"
PREMIUM_TITLE = "Premium Member"

Field = tuple[str, str]


def format_timestamp(timestamp: int) -> str:
    """Render a server timestamp (seconds since the epoch) in local ``asctime`` form."""
    if not 0 <= timestamp <= 0xFFFFFFFF:
        raise ValueError(f"timestamp must fit in 32 unsigned bits, got {timestamp}")
    return time.asctime(time.localtime(timestamp))


def _signed32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x1_0000_0000 if value >= 0x8000_0000 else value


def _email(info: UserInfo) -> str:
    return info.email if info.email else WITHHELD


def _room(info: UserInfo) -> str:
    lobby = info.lobby
    if lobby is None:
        return OFFLINE_ROOM
    name = getattr(lobby, "lobby_name", None)
    return str(name) if name is not None else str(lobby)


def _presence(info: UserInfo) -> list[Field]:
    fields = [("Logged in:", format_timestamp(info.last_login))]
    if info.last_logout != 0:
        fields.append(("Logged out:", format_timestamp(info.last_logout)))
    return fields


def describe_user_info(info: UserInfo) -> list[Field]:
    """The caption and value pairs shown for a regular user."""
    return [
        ("Account ID:", str(_signed32(info.user_id))),
        ("Nickname:", info.nickname),
        ("Real name:", info.real_name),
        ("E-mail:", _email(info)),
        *_presence(info),
        ("Room:", _room(info)),
    ]


def describe_premium_user_info(info: PremiumUserInfo) -> list[Field]:
    """The caption and value pairs shown for a premium member."""
    fav_game: Any = info.fav_game
    return [
        ("Account:", info.account_name),
        ("Signed up:", format_timestamp(info.member_since)),
        ("Real name:", info.real_name),
        ("E-mail:", _email(info)),
        ("Web:", info.web_site),
        ("Fave Game:", fav_game.game_name if fav_game is not None else ""),
        ("Quote/Notes:", info.quote),
        *_presence(info),
        ("Room:", _room(info)),
    ]


def render_fields(fields: Iterable[Field]) -> str:
    """Lay out caption and value pairs as aligned lines of text."""
    rows = list(fields)
    if not rows:
        return ""
    width = max(len(caption) for caption, _ in rows)
    return "\n".join(f"{caption:<{width}} {value}".rstrip() for caption, value in rows)