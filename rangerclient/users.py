"""Users seen in lobbies and the details the server reports about them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .gamelist import parse_game_list
from .plugins import Plugin, PluginManager
from .protocol import UserStatus

_LOCATION_SIZE = 12

_PREMIUM = frozenset(
    {
        UserStatus.PREMIUM_NOT_IDLE,
        UserStatus.PREMIUM_IDLE,
        UserStatus.PREMIUM_PLAYING_NOT_IDLE,
        UserStatus.PREMIUM_PLAYING_IDLE,
    }
)
_PLAYING = frozenset(
    {
        UserStatus.REGULAR_PLAYING_NOT_IDLE,
        UserStatus.REGULAR_PLAYING_IDLE,
        UserStatus.PREMIUM_PLAYING_NOT_IDLE,
        UserStatus.PREMIUM_PLAYING_IDLE,
    }
)
_IDLE = frozenset(
    {
        UserStatus.REGULAR_IDLE,
        UserStatus.PREMIUM_IDLE,
        UserStatus.REGULAR_PLAYING_IDLE,
        UserStatus.PREMIUM_PLAYING_IDLE,
    }
)


def _as_status(value: int) -> int:
    value &= 0xFF
    try:
        return UserStatus(value)
    except ValueError:
        return value


@dataclass
class User:
    """A user present in a lobby or game room."""

    nick: str = "default nick"
    user_id: int = 0
    icon_id: int = 0
    status: int = UserStatus.REGULAR_NOT_IDLE
    icon: Any = None
    current_lobby: Any = None
    games_list: list[Plugin] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.status = _as_status(self.status)

    def is_premium(self) -> bool:
        return self.status in _PREMIUM

    def is_playing(self) -> bool:
        return self.status in _PLAYING

    def is_idle(self) -> bool:
        return self.status in _IDLE

    def set_idle(self) -> None:
        """Move to the idle variant of the current status."""
        self.status = _as_status(self.status + 1)

    def set_active(self) -> None:
        """Move back from the idle variant of the current status."""
        self.status = _as_status(self.status - 1)

    def add_game(self, game: Plugin | None) -> None:
        """Append a game to the user's list; None is ignored."""
        if game is None:
            return
        self.games_list.append(game)

    def parse_games_list(self, data: bytes, manager: PluginManager) -> None:
        """Add the plugins for every game code set in a game-list bitmap."""
        for code in parse_game_list(data):
            self.add_game(manager.find_plugin_by_code(code))


def _location(value: bytes) -> bytes:
    value = bytes(value)
    if len(value) < _LOCATION_SIZE:
        raise ValueError(
            f"location needs {_LOCATION_SIZE} bytes, got {len(value)}"
        )
    return value[:_LOCATION_SIZE]


@dataclass
class UserInfo:
    """Details returned by a user info request."""

    nickname: str = "default nick"
    real_name: str = "default name"
    user_id: int = 0
    last_login: int = 0
    last_logout: int = 0
    idle_since: int = 0
    icon_id: int = 0
    room_id: int = 0
    location: bytes = bytes(_LOCATION_SIZE)
    lobby: Any = None
    icon: Any = None
    email: str = ""

    def __post_init__(self) -> None:
        self.location = _location(self.location)


@dataclass
class PremiumUserInfo(UserInfo):
    """Details of a premium member, with the extra profile fields."""

    account_name: str = ""
    web_site: str = ""
    quote: str = ""
    member_since: int = 0
    picture_id: int = 0
    fav_game: Plugin | None = None