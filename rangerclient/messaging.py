"""Private one-to-one conversations between users."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .protocol import Command, Packet

_USER_ID = struct.Struct(">I")


def build_private_message(user_id: int, text: str) -> Packet:
    """Build the packet that sends ``text`` to the user with ``user_id``."""
    if not text:
        raise ValueError("private message text must not be empty")
    if "\x00" in text:
        raise ValueError("private message text must not contain NUL characters")
    payload = _USER_ID.pack(user_id & 0xFFFFFFFF) + text.encode("latin-1") + b"\x00"
    return Packet(Command.SEND_PRIVATE_MESSAGE, payload)


@dataclass(frozen=True)
class ChatLine:
    """One line of a conversation."""

    speaker: str
    text: str
    outgoing: bool = False

    def __str__(self) -> str:
        return f"{self.speaker}: {self.text}"


@dataclass
class PrivateConversation:
    """The message history with one other user."""

    user_id: int = 0
    nickname: str = "nick"
    own_nickname: str = "nick"
    lines: list[ChatLine] = field(default_factory=list)

    def send(self, text: str) -> Packet | None:
        """Record an outgoing message and return the packet to send; empty text sends nothing."""
        if not text:
            return None
        packet = build_private_message(self.user_id, text)
        self.lines.append(ChatLine(self.own_nickname, text, outgoing=True))
        return packet

    def receive(self, text: str) -> ChatLine:
        """Record a message from the other user."""
        line = ChatLine(self.nickname, text)
        self.lines.append(line)
        return line

    def transcript(self) -> str:
        """The conversation as text, one line per message."""
        return "".join(f"{line}\n" for line in self.lines)