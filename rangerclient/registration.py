"""Account sign-up: e-mail availability check and account creation."""

from __future__ import annotations

import random
import socket
import struct
from dataclasses import dataclass
from enum import Enum, auto

from .profile import Profile
from .protocol import (
    HEADER_SIZE,
    SERVER_HOSTNAME,
    SERVER_PORT,
    ClientAuth,
    ClientAuthAck,
    Command,
    CreateAccountHeader,
    Packet,
    decode_header,
    read_response_code,
)
from .security import REGISTER_CHECKSUM, checksum, encrypt_verify_code

MAX_FIELD_LENGTH = 32
MAC_OBFUSCATION = 0x77
PROFANITY_FILTER_ON = 0
PROFANITY_FILTER_OFF = 4

_EMAIL_AVAILABLE = 0
_EMAIL_TAKEN = 1
_ACCOUNT_DENIED = 0
_ACCOUNT_CREATED = 3
_TIMEOUT = 30.0


class RegistrationError(Exception):
    """Raised when the sign-up cannot go on."""


class Stage(Enum):
    """What the session asks of the server once it is ready."""

    CHECK_EMAIL = auto()
    REGISTER = auto()


class Outcome(Enum):
    """The server's answer to a sign-up step."""

    EMAIL_AVAILABLE = auto()
    EMAIL_TAKEN = auto()
    ACCOUNT_CREATED = auto()
    ACCOUNT_DENIED = auto()


def _check_field(value: str, message: str) -> None:
    if not value:
        raise RegistrationError(message)
    if len(value) > MAX_FIELD_LENGTH:
        raise RegistrationError(f"{message} (at most {MAX_FIELD_LENGTH} characters)")


def _encode_field(value: str) -> bytes:
    if "\x00" in value:
        raise RegistrationError("fields must not contain NUL characters")
    try:
        return value.encode("latin-1") + b"\x00"
    except UnicodeEncodeError as exc:
        raise RegistrationError(f"cannot encode {value!r}") from exc


@dataclass
class AccountDetails:
    """What the user enters to create an account."""

    email: str
    password: str
    nickname: str = ""
    realname: str = ""
    profanity_filter: bool = False

    def validate_account(self) -> None:
        """Check the e-mail address and password."""
        _check_field(self.email, "Please enter a valid e-mail address.")
        _check_field(self.password, "Please enter a valid password.")

    def validate_personal(self) -> None:
        """Check the nickname and real name."""
        _check_field(self.nickname, "Please enter a valid nickname.")
        _check_field(self.realname, "Please enter a valid name.")


class RegistrationSession:
    """State of one connection to the server during sign-up."""

    def __init__(
        self,
        details: AccountDetails,
        stage: Stage = Stage.CHECK_EMAIL,
        rng: random.Random | None = None,
    ) -> None:
        self.details = details
        self.stage = stage
        self.rng = rng or random.Random()
        self.verify_code: bytes | None = None
        self.mac_address: bytes | None = None
        self.email_confirmed = False
        self.outcome: Outcome | None = None
        self.finished = False
        self.progress = 1

    def handle_packet(self, packet: Packet) -> Packet | None:
        """React to a packet from the server; return the reply to send, if any."""
        command = packet.command
        if command == Command.CLIENT_VERIFY:
            return self.client_verify(packet)
        if command == Command.SERVER_VERIFY_ACK:
            self.progress = 4
            return None
        if command == Command.READY_TO_PROCESS:
            self.progress = 5
            if self.stage is Stage.CHECK_EMAIL:
                return self.check_email()
            return self.register_account()
        if command == Command.CONFIRM_ACCOUNT_ACK:
            if self.stage is Stage.CHECK_EMAIL:
                self.check_email_ack(packet)
            else:
                self.create_account_ack(packet)
        return None

    def client_verify(self, packet: Packet) -> Packet:
        """Answer the server's version challenge."""
        auth = ClientAuth.unpack(packet.payload)
        answer = encrypt_verify_code(auth.code)
        self.verify_code = struct.pack(">I", answer)
        self.progress = 3
        ack = ClientAuthAck(client_version=auth.version, verify_code=answer)
        return Packet(Command.CLIENT_VERIFY_ACK, ack.pack())

    def check_email(self) -> Packet:
        """Ask whether the e-mail address is still free."""
        return Packet(Command.CONFIRM_EMAIL_ADDRESS, _encode_field(self.details.email))

    def check_email_ack(self, packet: Packet) -> Outcome | None:
        """Read the answer to the e-mail check."""
        self.progress = 6
        code = read_response_code(packet.payload)
        self.finished = True
        if code == _EMAIL_AVAILABLE:
            self.email_confirmed = True
            self.outcome = Outcome.EMAIL_AVAILABLE
        elif code == _EMAIL_TAKEN:
            self.outcome = Outcome.EMAIL_TAKEN
        return self.outcome

    def register_account(self) -> Packet:
        """Build the account creation request with a fresh made-up hardware address."""
        if self.verify_code is None:
            raise RegistrationError("the server has not sent its version challenge yet")
        mac = bytes([0, 3]) + bytes(self.rng.randrange(255) for _ in range(4))
        self.mac_address = mac
        obfuscated = bytes(b ^ MAC_OBFUSCATION for b in mac)
        value = checksum(self.verify_code, obfuscated, 0, 0, REGISTER_CHECKSUM)
        header = CreateAccountHeader(
            checksum=value,
            profanity_filter=(
                PROFANITY_FILTER_ON if self.details.profanity_filter else PROFANITY_FILTER_OFF
            ),
        )
        fields = b"".join(
            _encode_field(text)
            for text in (
                self.details.email,
                self.details.password,
                self.details.nickname,
                self.details.realname,
            )
        )
        payload = bytes(4) + obfuscated + header.pack() + fields
        return Packet(Command.CREATE_ACCOUNT, payload)

    def create_account_ack(self, packet: Packet) -> Outcome | None:
        """Read the answer to the account creation request."""
        self.progress = 6
        code = read_response_code(packet.payload)
        self.finished = True
        if code == _ACCOUNT_CREATED:
            self.outcome = Outcome.ACCOUNT_CREATED
        elif code == _ACCOUNT_DENIED:
            self.outcome = Outcome.ACCOUNT_DENIED
        return self.outcome

    def make_profile(self) -> Profile:
        """The profile to remember for the newly created account."""
        if self.mac_address is None:
            raise RegistrationError("no account has been registered in this session")
        return Profile(
            gr_id=0,
            email=self.details.email,
            nickname=self.details.nickname,
            realname=self.details.realname,
            mac_address=self.mac_address,
        )


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    chunks = bytearray()
    while len(chunks) < size:
        chunk = sock.recv(size - len(chunks))
        if not chunk:
            raise RegistrationError("connection to the server was lost")
        chunks.extend(chunk)
    return bytes(chunks)


def run_registration(
    details: AccountDetails,
    stage: Stage = Stage.CHECK_EMAIL,
    host: str = SERVER_HOSTNAME,
    port: int = SERVER_PORT,
) -> RegistrationSession:
    """Connect to the server and carry one sign-up step through to its answer."""
    details.validate_account()
    if stage is Stage.REGISTER:
        details.validate_personal()
    session = RegistrationSession(details, stage)
    try:
        sock = socket.create_connection((host, port), timeout=_TIMEOUT)
    except OSError as exc:
        raise RegistrationError(
            "Unable to connect to the server. Please check your connection and try again."
        ) from exc
    with sock:
        session.progress = 2
        try:
            while not session.finished:
                command, length = decode_header(_recv_exact(sock, HEADER_SIZE))
                payload = _recv_exact(sock, length)
                reply = session.handle_packet(Packet(command, payload))
                if reply is not None:
                    sock.sendall(reply.encode())
        except OSError as exc:
            raise RegistrationError(f"connection error: {exc}") from exc
    return session