"""Verification-code transform and account checksum used during sign-up and login."""

from __future__ import annotations

import struct

REGISTER_CHECKSUM = 1
LOGIN_CHECKSUM = 2

_MASK32 = 0xFFFFFFFF
_POLY = 0xEDB88320
_DEFAULT_LAN_BYTES = bytes([0x3F, 0x57, 0xFE, 0x9B])


def _build_table() -> bytes:
    words = []
    for n in range(256):
        value = n
        for _ in range(8):
            value = (value >> 1) ^ _POLY if value & 1 else value >> 1
        words.append(value)
    return struct.pack(">256I", *words)


_TABLE_MEMORY = _build_table()


def _check_u32(name: str, value: int) -> int:
    if not 0 <= value <= _MASK32:
        raise ValueError(f"{name} must fit in 32 unsigned bits, got {value}")
    return value


def mulhwu(one: int, two: int) -> int:
    """High 32 bits of the 64-bit product of two unsigned 32-bit words."""
    _check_u32("one", one)
    _check_u32("two", two)
    return ((one * two) >> 32) & _MASK32


def encrypt_verify_code(code: int) -> int:
    """Transform the server's challenge code into the client's answer."""
    _check_u32("code", code)
    r3 = code ^ 0x22356929
    r0 = mulhwu(0x4DBF4623, r3) >> 12
    r0 = (r0 * 0x34AF) & _MASK32
    r0 = (r3 - r0) & _MASK32
    return (r3 + r0) & _MASK32


def lwzx(offset: int) -> int:
    """Load a big-endian word from the lookup memory at a byte offset.

    Offsets whose word would run past the end leave the value unchanged.
    """
    if offset < 0 or offset + 4 > len(_TABLE_MEMORY):
        return offset
    (word,) = struct.unpack_from(">I", _TABLE_MEMORY, offset)
    return word


def _run(state: int, data: bytes) -> int:
    for byte in data:
        looked_up = lwzx(((byte ^ state) & 0xFF) << 2)
        state = ((state >> 8) & 0x00FFFFFF) ^ looked_up
    return state


def checksum(code: bytes, mac: bytes, user_id: int, lan_ip: int, login_type: int) -> int:
    """Checksum over verify code, account id, MAC address and, for logins, LAN address.

    ``code`` is the four bytes of the verify code as sent on the wire and
    ``mac`` the six bytes of the (already obfuscated) hardware address.
    """
    code = bytes(code)
    mac = bytes(mac)
    if len(code) != 4:
        raise ValueError(f"code must be 4 bytes, got {len(code)}")
    if len(mac) != 6:
        raise ValueError(f"mac must be 6 bytes, got {len(mac)}")

    id_bytes = struct.pack(">I", user_id & _MASK32)
    if login_type == LOGIN_CHECKSUM:
        lan_bytes = struct.pack(">I", (lan_ip & _MASK32) ^ _MASK32)
    else:
        lan_bytes = _DEFAULT_LAN_BYTES

    state = _MASK32
    state = _run(state, code)
    state = _run(state, id_bytes)
    state = _run(state, mac)
    if login_type == REGISTER_CHECKSUM:
        return state ^ _MASK32
    state = _run(state, lan_bytes)
    return state ^ _MASK32