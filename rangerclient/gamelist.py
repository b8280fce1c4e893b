"""Encoding of a user's game list as a length-prefixed bitmap of game codes."""

from __future__ import annotations

from typing import Iterable

from .protocol import ProtocolError

_MAX_BYTES = 0xFF


def c_string(data: bytes) -> str:
    """Decode bytes up to the first NUL, one character per byte."""
    data = bytes(data)
    end = data.find(b"\x00")
    if end >= 0:
        data = data[:end]
    return data.decode("latin-1")


def _signed32(code: int) -> int:
    code &= 0xFFFFFFFF
    return code - 0x1_0000_0000 if code >= 0x8000_0000 else code


def make_game_list(codes: Iterable[int]) -> bytes:
    """Build the bitmap for a collection of game codes.

    The first byte holds the number of bitmap bytes that follow. Game code
    ``n`` sets bit ``(n - 1) % 8`` of bitmap byte ``(n - 1) // 8``; codes that
    are zero or negative as signed 32-bit values set no bit.
    """
    ordered = sorted(_signed32(code) for code in codes)
    if not ordered:
        return b"\x00"

    highest = ordered[-1]
    byte_count = max(highest, 0) // 8 + 1
    if byte_count > _MAX_BYTES:
        raise ValueError(f"game code {highest} is too large for a game list")

    bitmap = bytearray(byte_count)
    for code in ordered:
        if code > 0:
            index, bit = divmod(code - 1, 8)
            bitmap[index] |= 1 << bit
    return bytes([byte_count]) + bytes(bitmap)


def parse_game_list(data: bytes) -> list[int]:
    """Return the game codes set in a game-list bitmap, in ascending order."""
    data = bytes(data)
    if not data:
        raise ProtocolError("game list is empty")
    count = data[0]
    bitmap = data[1 : 1 + count]
    if len(bitmap) < count:
        raise ProtocolError(
            f"game list announces {count} bytes but holds {len(bitmap)}"
        )
    return [
        index * 8 + bit + 1
        for index, byte in enumerate(bitmap)
        for bit in range(8)
        if byte & (1 << bit)
    ]