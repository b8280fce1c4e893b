import struct

import pytest

from rangerclient.protocol import (
    ClientAuth,
    ClientAuthAck,
    Command,
    CreateAccountHeader,
    GameRoomInfo,
    HostGameRoom,
    Packet,
    ProtocolError,
    RoomStatus,
    RoomStatusChanged,
    UserChangedIcon,
    UserInfoHeader,
    decode_header,
    read_response_code,
)


def test_packet_encode_wire_bytes():
    data = Packet(Command.CLIENT_VERIFY_ACK, b"abc").encode()
    assert data == b"\x00\x00\x00\x02\x00\x00\x00\x03abc"


def test_packet_round_trip():
    packet = Packet(Command.SEND_PRIVATE_MESSAGE, b"\x00\x00\x00\x07hello\x00")
    decoded = Packet.decode(packet.encode())
    assert decoded == packet
    assert decoded.command is Command.SEND_PRIVATE_MESSAGE


def test_packet_decode_unknown_command_keeps_value():
    raw = struct.pack(">II", 0x1234, 2) + b"xy"
    decoded = Packet.decode(raw)
    assert decoded.command == 0x1234
    assert decoded.payload == b"xy"


def test_packet_decode_length_mismatch():
    raw = struct.pack(">II", Command.GR_ALIVE_PULSE, 10) + b"short"
    with pytest.raises(ProtocolError):
        Packet.decode(raw)


def test_decode_header_short():
    with pytest.raises(ProtocolError):
        decode_header(b"\x00\x00\x00")


def test_decode_header_values():
    raw = Packet(Command.SERVER_VERIFY_ACK, b"12345").encode()
    assert decode_header(raw) == (Command.SERVER_VERIFY_ACK, 5)


def test_client_auth_unpack():
    raw = struct.pack(">5I", 10, 11, 12, 13, 14)
    auth = ClientAuth.unpack(raw)
    assert (auth.version, auth.version1, auth.code, auth.version2, auth.version3) == (
        10,
        11,
        12,
        13,
        14,
    )


def test_client_auth_short():
    with pytest.raises(ProtocolError):
        ClientAuth.unpack(b"\x00" * 19)


def test_client_auth_ack_defaults():
    packed = ClientAuthAck(client_version=7, verify_code=99).pack()
    assert struct.unpack(">4I", packed) == (7, 99, 0, 65535)


def test_client_auth_ack_out_of_range():
    with pytest.raises(ProtocolError):
        ClientAuthAck(client_version=-1, verify_code=0).pack()


def test_create_account_header_field_order():
    packed = CreateAccountHeader(checksum=5, profanity_filter=4).pack()
    assert struct.unpack(">4I", packed) == (5, 0, 4, 0)


def test_user_info_header_unpack():
    location = bytes(range(12))
    raw = struct.pack(">5I", 1, 2, 3, 4, 5) + location + b"trailing"
    header = UserInfoHeader.unpack(raw)
    assert header.user_id == 1
    assert header.icon_id == 5
    assert header.location == location
    assert len(raw) - UserInfoHeader.SIZE == len(b"trailing")


def test_game_room_unpack_and_host():
    raw = struct.pack(">4I", 3, 42, 2, 8) + bytes([10, 0, 0, 1]) + struct.pack(">I", 0)
    room = GameRoomInfo.unpack(raw)
    assert room.game_code == 42
    assert room.max_players == 8
    assert room.host == "10.0.0.1"


def test_game_room_short():
    with pytest.raises(ProtocolError):
        GameRoomInfo.unpack(b"\x00" * 20)


def test_user_changed_icon():
    icon = UserChangedIcon.unpack(struct.pack(">2I", 77, 88))
    assert (icon.user_id, icon.icon_id) == (77, 88)


def test_room_status_changed_maps_enum():
    change = RoomStatusChanged.unpack(struct.pack(">2I", 9, 0x05))
    assert change.status is RoomStatus.PLAYING_LOCKED_NO_LATE
    assert change.room_id == 9


def test_host_game_room_pack():
    packed = HostGameRoom(game_id=12, max_players=6, late_joiners=1).pack()
    assert struct.unpack(">4I", packed) == (12, 6, 0xFFFFFF, 1)


def test_read_response_code():
    assert read_response_code(struct.pack(">I", 3) + b"rest") == 3


def test_read_response_code_short():
    with pytest.raises(ProtocolError):
        read_response_code(b"\x01")