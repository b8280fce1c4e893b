import random
import socket
import struct
import threading

import pytest

from rangerclient.protocol import (
    HEADER_SIZE,
    ClientAuthAck,
    Command,
    CreateAccountHeader,
    Packet,
    decode_header,
)
from rangerclient.registration import (
    AccountDetails,
    Outcome,
    RegistrationError,
    RegistrationSession,
    Stage,
    run_registration,
)
from rangerclient.security import REGISTER_CHECKSUM, checksum, encrypt_verify_code


def _details(**overrides):
    password = "password"
    values = dict(
        email="someone@example.com",
        nickname="Ranger",
        realname="Some One",
    )
    values.update(overrides)
    return AccountDetails(password=password, **values)


def _challenge(code=0x12345678, version=0x0105):
    return Packet(Command.CLIENT_VERIFY, struct.pack(">5I", version, 0, code, 0, 0))


def _ack(code):
    return Packet(Command.CONFIRM_ACCOUNT_ACK, struct.pack(">I", code))


def test_validate_account_rejects_empty_email():
    with pytest.raises(RegistrationError, match="e-mail"):
        _details(email="").validate_account()


def test_validate_account_rejects_empty_password():
    password = ""
    details = AccountDetails(email="someone@example.com", password=password)
    with pytest.raises(RegistrationError, match="password"):
        details.validate_account()


def test_validate_personal_rejects_missing_names():
    with pytest.raises(RegistrationError, match="nickname"):
        _details(nickname="").validate_personal()
    with pytest.raises(RegistrationError, match="name"):
        _details(realname="").validate_personal()


def test_validate_rejects_overlong_field():
    with pytest.raises(RegistrationError):
        _details(nickname="n" * 33).validate_personal()


def test_client_verify_replies_with_transformed_code():
    session = RegistrationSession(_details())
    reply = session.handle_packet(_challenge(code=0x12345678, version=0x0105))
    assert reply.command == Command.CLIENT_VERIFY_ACK
    expected = ClientAuthAck(0x0105, encrypt_verify_code(0x12345678)).pack()
    assert reply.payload == expected
    assert session.verify_code == struct.pack(">I", encrypt_verify_code(0x12345678))


def test_ready_in_check_email_stage_sends_email():
    session = RegistrationSession(_details(), Stage.CHECK_EMAIL)
    reply = session.handle_packet(Packet(Command.READY_TO_PROCESS))
    assert reply.command == Command.CONFIRM_EMAIL_ADDRESS
    assert reply.payload == b"someone@example.com\x00"


def test_check_email_ack_outcomes():
    available = RegistrationSession(_details())
    available.handle_packet(_ack(0))
    assert available.outcome is Outcome.EMAIL_AVAILABLE
    assert available.email_confirmed and available.finished

    taken = RegistrationSession(_details())
    taken.handle_packet(_ack(1))
    assert taken.outcome is Outcome.EMAIL_TAKEN
    assert not taken.email_confirmed


def test_check_email_ack_unknown_code_has_no_outcome():
    session = RegistrationSession(_details())
    assert session.check_email_ack(_ack(7)) is None
    assert session.finished


def test_register_before_challenge_fails():
    session = RegistrationSession(_details(), Stage.REGISTER)
    with pytest.raises(RegistrationError):
        session.handle_packet(Packet(Command.READY_TO_PROCESS))


@pytest.mark.parametrize("flag, expected", [(True, 0), (False, 4)])
def test_register_account_layout(flag, expected):
    session = RegistrationSession(
        _details(profanity_filter=flag), Stage.REGISTER, random.Random(5)
    )
    session.handle_packet(_challenge())
    packet = session.handle_packet(Packet(Command.READY_TO_PROCESS))
    assert packet.command == Command.CREATE_ACCOUNT
    payload = packet.payload
    assert payload[:4] == bytes(4)
    obfuscated = payload[4:10]
    assert bytes(b ^ 0x77 for b in obfuscated) == session.mac_address
    assert session.mac_address[:2] == b"\x00\x03"
    assert all(b < 255 for b in session.mac_address[2:])
    header = CreateAccountHeader(
        checksum=checksum(session.verify_code, obfuscated, 0, 0, REGISTER_CHECKSUM),
        profanity_filter=expected,
    ).pack()
    assert payload[10:26] == header
    assert payload[26:].split(b"\x00")[:4] == [
        b"someone@example.com",
        b"password",
        b"Ranger",
        b"Some One",
    ]
    assert payload.endswith(b"\x00")


def test_create_account_ack_outcomes():
    created = RegistrationSession(_details(), Stage.REGISTER)
    created.handle_packet(_ack(3))
    assert created.outcome is Outcome.ACCOUNT_CREATED

    denied = RegistrationSession(_details(), Stage.REGISTER)
    denied.handle_packet(_ack(0))
    assert denied.outcome is Outcome.ACCOUNT_DENIED


def test_make_profile_after_registration():
    session = RegistrationSession(_details(), Stage.REGISTER, random.Random(1))
    session.handle_packet(_challenge())
    session.register_account()
    profile = session.make_profile()
    assert profile.gr_id == 0
    assert profile.email == "someone@example.com"
    assert profile.nickname == "Ranger"
    assert profile.realname == "Some One"
    assert profile.mac_address == session.mac_address
    assert profile.write() is None


def test_make_profile_without_registration_fails():
    with pytest.raises(RegistrationError):
        RegistrationSession(_details()).make_profile()


def _recv_exact(conn, size):
    data = b""
    while len(data) < size:
        chunk = conn.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def _read_packet(conn):
    command, length = decode_header(_recv_exact(conn, HEADER_SIZE))
    return Packet(command, _recv_exact(conn, length))


def _serve(listener, received, close_early=False):
    conn, _ = listener.accept()
    with conn:
        if close_early:
            return
        conn.sendall(_challenge().encode())
        received.append(_read_packet(conn))
        conn.sendall(Packet(Command.SERVER_VERIFY_ACK).encode())
        conn.sendall(Packet(Command.READY_TO_PROCESS).encode())
        received.append(_read_packet(conn))
        conn.sendall(_ack(0).encode())


def _start_server(close_early=False):
    listener = socket.socket()
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    received = []
    thread = threading.Thread(
        target=_serve, args=(listener, received, close_early), daemon=True
    )
    thread.start()
    return listener, thread, received


def test_run_registration_checks_email_against_server():
    listener, thread, received = _start_server()
    with listener:
        port = listener.getsockname()[1]
        session = run_registration(_details(), Stage.CHECK_EMAIL, "127.0.0.1", port)
        thread.join(5)
    assert session.outcome is Outcome.EMAIL_AVAILABLE
    assert [p.command for p in received] == [
        Command.CLIENT_VERIFY_ACK,
        Command.CONFIRM_EMAIL_ADDRESS,
    ]
    assert received[1].payload == b"someone@example.com\x00"


def test_run_registration_reports_lost_connection():
    listener, thread, _ = _start_server(close_early=True)
    with listener:
        port = listener.getsockname()[1]
        with pytest.raises(RegistrationError):
            run_registration(_details(), Stage.CHECK_EMAIL, "127.0.0.1", port)
        thread.join(5)


def test_run_registration_validates_before_connecting():
    with pytest.raises(RegistrationError, match="nickname"):
        run_registration(_details(nickname=""), Stage.REGISTER, "127.0.0.1", 1)