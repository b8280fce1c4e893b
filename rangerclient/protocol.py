"""Wire format of the lobby server protocol: commands, status codes and packet layouts."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

SERVER_HOSTNAME = "master.gameranger.com"
SERVER_PORT = 16000
OFFLINE = 0

_HEADER = struct.Struct(">II")
HEADER_SIZE = _HEADER.size


class Command(IntEnum):
    """Command codes carried in every packet header."""

    CLIENT_VERIFY = 0x01
    CLIENT_VERIFY_ACK = 0x02
    READY_TO_PROCESS = 0x04
    CREATE_ACCOUNT = 0x05
    CONFIRM_ACCOUNT_ACK = 0x07
    LOGIN_TO_GAMERANGER = 0x08
    BAN_TIME_LEFT = 0x0A
    APP_BANNER = 0x0B
    USER_LEFT_SERVER = 0x0D
    PUBLIC_LOBBY_LIST = 0x0F
    JOIN_PUBLIC_LOBBY = 0x10
    LOBBY_USER_LIST = 0x13
    GAME_ROOM_OPENED = 0x19
    GAME_ROOM_CLOSED = 0x1A
    JOIN_GAME_ROOM = 0x1B
    GAME_ROOM_FULL = 0x1D
    GAME_ROOM_INVALID_PASSWORD = 0x1E
    GAME_ROOM_USER_LIST = 0x1F
    PLAYER_JOINED_GAME_ROOM = 0x20
    PLAYER_LEFT_GAME_ROOM = 0x21
    PLAYER_JOINED_MY_GAME_ROOM = 0x22
    PLAYER_LEFT_MY_GAME_ROOM = 0x23
    HOST_GAME_ROOM = 0x24
    LEAVE_GAME_ROOM = 0x27
    SEND_LOBBY_CHAT_MESSAGE = 0x28
    LOBBY_CHAT_MESSAGE = 0x29
    LOBBY_CHAT_MESSAGE_ME = 0x2B
    SEND_GAME_ROOM_MESSAGE = 0x2C
    GAME_ROOM_CHAT_MESSAGE = 0x2D
    SEND_PRIVATE_MESSAGE = 0x30
    RCV_PRIVATE_MESSAGE = 0x32
    CHANGE_NICKNAME = 0x35
    USER_CHANGED_NICKNAME = 0x36
    REQUEST_ICON_DATA = 0x37
    RECEIVED_ICON_DATA = 0x38
    CHANGE_ICON = 0x39
    USER_CHANGED_ICON = 0x3A
    CHANGE_REAL_NAME = 0x3B
    GET_USER_INFO = 0x3E
    REG_USER_INFO = 0x40
    USER_IS_IDLE = 0x43
    USER_IS_ACTIVE = 0x44
    CHANGE_ACCOUNT_PASSWORD = 0x52
    PASSWORD_CHANGE_SUCCESSFUL = 0x53
    GAME_LAUNCH_LOADING = 0x57
    GAME_ROOM_IS_LOADING = 0x58
    GAME_LAUNCH_DONE = 0x59
    GAME_ROOM_LAUNCHED = 0x5A
    ABORT_GAME_ROOM = 0x5B
    PM_ERROR_USER_IN_GAME = 0x5D
    GAME_ROOM_NO_LATE_JOINERS = 0x5E
    GAME_ROOM_STATUS_CHANGED = 0x5F
    SERVER_MESSAGE = 0x62
    USER_IN_GAME = 0x63
    USER_NOT_IN_GAME = 0x64
    FIND_USER = 0x6D
    FIND_USER_RESULTS = 0x6E
    GR_ALIVE_PULSE = 0x9B
    LOBBY_USER_ACTION = 0xB5
    GAME_ROOMS_LIST = 0xBC
    MY_USER_INFO = 0xBD
    CONFIRM_EMAIL_ADDRESS = 0xC5
    INVALID_ACCOUNT = 0xC8
    INVALID_LOGIN_PASSWORD = 0xCA
    SERVER_VERIFY_ACK = 0xD0
    PREMIUM_USER_INFO = 0xD1
    GET_PREMIUM_USER_IMAGE = 0xD2
    RECV_PREMIUM_USER_IMAGE = 0xD3
    GR_LADDERS = 0xF9


class SearchType(IntEnum):
    """Search criteria for the find-user request."""

    BY_ID = 0x00
    BY_EMAIL = 0x01
    BY_NICK = 0x02
    BY_ACCOUNT = 0x03


class UserStatus(IntEnum):
    """Presence status of a user in a lobby."""

    REGULAR_NOT_IDLE = 0
    REGULAR_IDLE = 1
    PREMIUM_NOT_IDLE = 2
    PREMIUM_IDLE = 3
    REGULAR_PLAYING_NOT_IDLE = 8
    REGULAR_PLAYING_IDLE = 9
    PREMIUM_PLAYING_NOT_IDLE = 10
    PREMIUM_PLAYING_IDLE = 11


class RoomStatus(IntEnum):
    """Lock, late-join and playing state of a game room."""

    NOT_LOCKED_NO_LATE = 0x00
    LOCKED_NO_LATE = 0x01
    NOT_LOCKED_LATE = 0x02
    LOCKED_LATE = 0x03
    PLAYING_NOT_LOCKED = 0x04
    PLAYING_LOCKED_NO_LATE = 0x05
    PLAYING_NOT_LOCKED_LATE = 0x06
    PLAYING_LOCKED_LATE = 0x07


class ProtocolError(ValueError):
    """Raised for malformed or truncated protocol data."""


def _as_command(value: int) -> int:
    try:
        return Command(value)
    except ValueError:
        return value


def _unpack(layout: struct.Struct, data: bytes, what: str) -> tuple:
    if len(data) < layout.size:
        raise ProtocolError(
            f"{what} needs {layout.size} bytes, got {len(data)}"
        )
    return layout.unpack_from(data)


def _pack(layout: struct.Struct, what: str, *values) -> bytes:
    try:
        return layout.pack(*values)
    except struct.error as exc:
        raise ProtocolError(f"cannot encode {what}: {exc}") from exc


def decode_header(data: bytes) -> tuple[int, int]:
    """Return (command, payload length) from the first eight bytes of a packet."""
    command, length = _unpack(_HEADER, data, "packet header")
    return _as_command(command), length


@dataclass(frozen=True)
class Packet:
    """A command and its payload."""

    command: int
    payload: bytes = b""

    def encode(self) -> bytes:
        """Serialise the packet as header followed by payload."""
        header = _pack(_HEADER, "packet header", int(self.command), len(self.payload))
        return header + bytes(self.payload)

    @classmethod
    def decode(cls, data: bytes) -> Packet:
        """Parse one complete packet; the data must hold exactly one."""
        command, length = decode_header(data)
        body = bytes(data[HEADER_SIZE:])
        if len(body) != length:
            raise ProtocolError(
                f"payload length {length} does not match {len(body)} bytes received"
            )
        return cls(command, body)


@dataclass(frozen=True)
class ClientAuth:
    """Version challenge sent by the server."""

    version: int
    version1: int
    code: int
    version2: int
    version3: int

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct(">5I")

    @classmethod
    def unpack(cls, data: bytes) -> ClientAuth:
        return cls(*_unpack(cls._LAYOUT, data, "client auth"))


@dataclass(frozen=True)
class ClientAuthAck:
    """Reply to the version challenge."""

    client_version: int
    verify_code: int
    padding: int = 0
    srv_verify_code: int = 65535

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct(">4I")

    def pack(self) -> bytes:
        return _pack(
            self._LAYOUT,
            "client auth ack",
            self.client_version,
            self.verify_code,
            self.padding,
            self.srv_verify_code,
        )


@dataclass(frozen=True)
class CreateAccountHeader:
    """Fixed part of an account creation request."""

    checksum: int
    profanity_filter: int
    padding: int = 0
    icon_id: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct(">4I")

    def pack(self) -> bytes:
        return _pack(
            self._LAYOUT,
            "create account header",
            self.checksum,
            self.padding,
            self.profanity_filter,
            self.icon_id,
        )


@dataclass(frozen=True)
class UserInfoHeader:
    """Fixed part of a user info reply."""

    user_id: int
    last_login: int
    last_logout: int
    idle_since: int
    icon_id: int
    location: bytes

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct(">5I12s")
    SIZE: ClassVar[int] = 32

    @classmethod
    def unpack(cls, data: bytes) -> UserInfoHeader:
        return cls(*_unpack(cls._LAYOUT, data, "user info header"))


@dataclass(frozen=True)
class GameRoomInfo:
    """One entry of a game room listing."""

    game_room_id: int
    game_code: int
    current_players: int
    max_players: int
    ip_address: bytes
    padding: int

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct(">4I4sI")
    SIZE: ClassVar[int] = 24

    @classmethod
    def unpack(cls, data: bytes) -> GameRoomInfo:
        return cls(*_unpack(cls._LAYOUT, data, "game room"))

    @property
    def host(self) -> str:
        """The host address in dotted form."""
        return str(ipaddress.IPv4Address(self.ip_address))


@dataclass(frozen=True)
class UserChangedIcon:
    """Notice that a user picked another icon."""

    user_id: int
    icon_id: int

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct(">2I")

    @classmethod
    def unpack(cls, data: bytes) -> UserChangedIcon:
        return cls(*_unpack(cls._LAYOUT, data, "user changed icon"))


@dataclass(frozen=True)
class RoomStatusChanged:
    """Notice that a game room changed state."""

    room_id: int
    status: int

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct(">2I")

    @classmethod
    def unpack(cls, data: bytes) -> RoomStatusChanged:
        room_id, status = _unpack(cls._LAYOUT, data, "room status")
        try:
            status = RoomStatus(status)
        except ValueError:
            pass
        return cls(room_id, status)


@dataclass(frozen=True)
class HostGameRoom:
    """Request to open a game room."""

    game_id: int
    max_players: int
    late_joiners: int
    unknown: int = 0xFFFFFF

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct(">4I")

    def pack(self) -> bytes:
        return _pack(
            self._LAYOUT,
            "host game room",
            self.game_id,
            self.max_players,
            self.unknown,
            self.late_joiners,
        )


_RESPONSE = struct.Struct(">I")


def read_response_code(payload: bytes) -> int:
    """Return the big-endian response code at the start of a payload."""
    (code,) = _unpack(_RESPONSE, payload, "response code")
    return code