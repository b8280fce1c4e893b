"""Saved login profiles and the directory that holds them."""

from __future__ import annotations

import logging
import random
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from .protocol import ProtocolError

log = logging.getLogger(__name__)

DEFAULT_PROFILE_DIRECTORY = "profiles"
_ID = struct.Struct(">I")
_MAC_SIZE = 6
_END_MARK = 0xFF


def make_mac(rng: random.Random | None = None) -> bytes:
    """Return a made-up hardware address starting 00:03."""
    rng = rng or random.Random()
    return bytes([0, 3]) + bytes(rng.randrange(256) for _ in range(4))


def _encode_string(name: str, value: str) -> bytes:
    if "\x00" in value:
        raise ValueError(f"{name} must not contain NUL characters")
    return value.encode("latin-1") + b"\x00"


def _take_string(data: bytes, pos: int, name: str) -> tuple[str, int]:
    end = data.find(b"\x00", pos)
    if end < 0:
        raise ProtocolError(f"profile {name} is not terminated")
    return data[pos:end].decode("latin-1"), end + 1


def _signed32(value: int) -> int:
    return value - 0x1_0000_0000 if value >= 0x8000_0000 else value


@dataclass
class Profile:
    """Account details remembered between sessions."""

    gr_id: int = 0
    email: str = "email"
    nickname: str = "nick"
    realname: str = "name"
    mac_address: bytes = field(default_factory=make_mac)
    games_list: bytes = b"\x00"
    password: str = ""
    save_pass: bool = False

    def to_bytes(self) -> bytes:
        """Serialise the profile in its on-disk layout."""
        mac = bytes(self.mac_address)
        if len(mac) != _MAC_SIZE:
            raise ValueError(f"mac_address must be {_MAC_SIZE} bytes, got {len(mac)}")
        games = bytes(self.games_list)
        if not games or len(games) < games[0] + 1:
            raise ValueError("games_list is shorter than its length prefix")
        parts = [
            _ID.pack(self.gr_id & 0xFFFFFFFF),
            mac,
            _encode_string("email", self.email),
            _encode_string("nickname", self.nickname),
            _encode_string("realname", self.realname),
            games[: games[0] + 1],
            _encode_string("password", self.password) if self.save_pass else b"\x00",
        ]
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> Profile:
        """Parse a profile; a missing games list or password keeps the default."""
        data = bytes(data)
        header = _ID.size + _MAC_SIZE
        if len(data) < header:
            raise ProtocolError(f"profile needs at least {header} bytes, got {len(data)}")
        (gr_id,) = _ID.unpack_from(data)
        mac = data[_ID.size : header]
        pos = header
        email, pos = _take_string(data, pos, "email")
        nickname, pos = _take_string(data, pos, "nickname")
        realname, pos = _take_string(data, pos, "real name")

        profile = cls(gr_id=gr_id, email=email, nickname=nickname,
                      realname=realname, mac_address=mac)

        if pos < len(data) and data[pos] != _END_MARK:
            size = data[pos] + 1
            if pos + size > len(data):
                raise ProtocolError("profile games list is truncated")
            profile.games_list = data[pos : pos + size]
            pos += size

        if pos < len(data) and data[pos] != _END_MARK:
            profile.password, pos = _take_string(data, pos, "password")
        profile.save_pass = bool(profile.password)
        return profile

    def write(self, directory: str | Path = DEFAULT_PROFILE_DIRECTORY) -> Path | None:
        """Save as ``<id>.bin`` in a directory; profiles without an id are not saved."""
        if self.gr_id == 0:
            return None
        path = Path(directory) / f"{_signed32(self.gr_id & 0xFFFFFFFF)}.bin"
        path.write_bytes(self.to_bytes())
        return path

    @classmethod
    def read(cls, path: str | Path) -> Profile:
        """Load a profile from a file."""
        return cls.from_bytes(Path(path).read_bytes())


class ProfileManager:
    """The profiles stored in one directory."""

    def __init__(self, directory: str | Path = DEFAULT_PROFILE_DIRECTORY) -> None:
        self.directory = Path(directory)
        self._profiles: list[Profile] = []

    def load_profiles(self) -> list[Profile]:
        """Read every file in the directory; return the profiles added."""
        if not self.directory.is_dir():
            log.error("Unable to load profiles: Directory does not exist(%s)", self.directory)
            return []
        try:
            files = sorted(p for p in self.directory.iterdir() if p.is_file())
        except OSError:
            log.error("Unable to load profiles: Unable to open directory(%s)", self.directory)
            return []
        loaded = []
        for path in files:
            try:
                profile = Profile.read(path)
            except (OSError, ProtocolError) as exc:
                log.warning("Skipping unreadable profile %s: %s", path, exc)
                continue
            loaded.append(profile)
        self._profiles.extend(loaded)
        log.info("Profiles successfully loaded.")
        return loaded

    def add_profile(self, profile: Profile) -> None:
        self._profiles.append(profile)

    def save_all(self) -> list[Path]:
        """Write every profile that has an id; return the paths written."""
        self.directory.mkdir(parents=True, exist_ok=True)
        written = (profile.write(self.directory) for profile in self._profiles)
        return [path for path in written if path is not None]

    def __iter__(self) -> Iterator[Profile]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)