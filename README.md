# rangerclient

A pure-Python library for the client side of a game lobby service. It has the
wire format, the sign-up exchange, saved profiles, game lists, user details and
private conversations. It needs nothing beyond the standard library.

## What is in it

- `rangerclient.protocol` is the wire format.
  - Command codes are in `Command`. Status values are in `UserStatus` and
    `RoomStatus`, and find-user criteria are in `SearchType`.
  - Packets are framed by `Packet` (`encode`, `decode`) and `decode_header`.
    Each packet has a big-endian 8-byte header of command and payload length.
  - The fixed-size records are `ClientAuth`, `ClientAuthAck`,
    `CreateAccountHeader`, `UserInfoHeader`, `GameRoomInfo`,
    `UserChangedIcon`, `RoomStatusChanged` and `HostGameRoom`.
  - `read_response_code` reads the big-endian response code at the start of a
    payload.
  - Short or malformed data raises `ProtocolError`, a `ValueError`.
  - The default server is in `SERVER_HOSTNAME` and `SERVER_PORT`.
- `rangerclient.security` handles client verification.
  - `encrypt_verify_code` turns the server's challenge code into the client's
    answer.
  - `checksum` computes the account checksum. Its inputs are the verify code
    bytes, the obfuscated MAC bytes, the user id and, for logins, the LAN
    address.
  - `mulhwu` and `lwzx` are the building blocks.
- `rangerclient.gamelist` handles game lists.
  - `make_game_list` packs game codes into a bitmap with a length prefix.
  - `parse_game_list` returns the codes set in a bitmap, in ascending order.
  - `c_string` decodes bytes up to the first NUL.
- `rangerclient.plugins` keeps track of games.
  - `PluginManager` holds `Plugin` entries.
  - `add_default_plugins` adds the "Chat" entry (code 0) and the
    "Unknown Game" entry (code 0xFFFFFFFF).
  - `find_plugin_by_code` falls back to the unknown-game entry when a code is
    not known.
  - `load_color_profile` reads a colour table file into `color_table`.
  - The manager supports `len()`, iteration and indexing.
- `rangerclient.profile` keeps profiles on disk.
  - `Profile` converts to and from the binary layout (`to_bytes`,
    `from_bytes`).
  - `Profile.write` saves a profile as `<id>.bin`. A profile with id 0 is not
    saved.
  - `Profile.read` loads a profile from a file.
  - `ProfileManager.load_profiles` reads every file in a directory and
    `save_all` writes the profiles back.
  - `make_mac` makes up a hardware address that starts `00:03`.
- `rangerclient.users` holds user state.
  - `User` has the status checks `is_premium`, `is_playing` and `is_idle`, and
    the transitions `set_idle` and `set_active`.
  - It keeps the games a user owns: `add_game`, and `parse_games_list`, which
    looks codes up in a `PluginManager`.
  - `UserInfo` and `PremiumUserInfo` hold the details the server returns
    about a user.
- `rangerclient.messaging` handles private messages.
  - `build_private_message` builds a `SEND_PRIVATE_MESSAGE` packet.
  - `PrivateConversation` records `ChatLine` entries: `send`, `receive` and
    `transcript`.
- `rangerclient.registration` handles account sign-up.
  - `AccountDetails` checks the sign-up fields with `validate_account` and
    `validate_personal`. A failed check raises `RegistrationError`.
  - `RegistrationSession` reacts to server packets for either stage
    (`Stage.CHECK_EMAIL` or `Stage.REGISTER`) and records an `Outcome`.
  - `run_registration` connects over TCP and carries one stage through to the
    server's answer.
- `rangerclient.infoview` renders user details as text.
  - `describe_user_info` and `describe_premium_user_info` return caption and
    value pairs.
  - `render_fields` aligns those pairs as lines of text.
  - `format_timestamp` renders a server timestamp in local `asctime` form.

## Examples

Answer the server's verify challenge:

```python
from rangerclient.security import encrypt_verify_code

answer = encrypt_verify_code(0x12345678)
```

Pack and unpack a game list:

```python
from rangerclient.gamelist import make_game_list, parse_game_list

data = make_game_list([1, 5, 12])      # b"\x02\x11\x08"
assert parse_game_list(data) == [1, 5, 12]
```

Look up games:

```python
from rangerclient.plugins import PluginManager

manager = PluginManager("plugins")
manager.add_default_plugins()
chat = manager.find_plugin_by_code(0)
unknown = manager.find_plugin_by_code(999)  # the "Unknown Game" entry
```

Save and load profiles:

```python
from rangerclient.profile import Profile, ProfileManager

profiles = ProfileManager("profiles")
profiles.add_profile(Profile(gr_id=1234, email="someone@example.com", nickname="someone"))
profiles.save_all()                     # writes profiles/1234.bin

reloaded = ProfileManager("profiles")
reloaded.load_profiles()
print([p.nickname for p in reloaded])
```

Track a user's state:

```python
from rangerclient.protocol import UserStatus
from rangerclient.users import User

user = User(nick="someone", user_id=42, status=UserStatus.PREMIUM_NOT_IDLE)
user.set_idle()
assert user.is_premium() and user.is_idle()
```

Hold a private conversation:

```python
from rangerclient.messaging import PrivateConversation

chat = PrivateConversation(user_id=42, nickname="friend", own_nickname="me")
packet = chat.send("hello")             # a SEND_PRIVATE_MESSAGE packet
wire = packet.encode()
chat.receive("hi there")
print(chat.transcript())
```

Check whether an e-mail address is free:

```python
from rangerclient.registration import AccountDetails, Stage, run_registration

password = "password"
details = AccountDetails(email="someone@example.com", password=password)
session = run_registration(details, Stage.CHECK_EMAIL)
print(session.outcome)
```

Show a user's details:

```python
from rangerclient.infoview import describe_user_info, render_fields
from rangerclient.users import UserInfo

info = UserInfo(nickname="someone", real_name="Some One", user_id=42, last_login=0)
print(render_fields(describe_user_info(info)))
```

## What it does not do

This is a library only.
- It has no command-line program and no graphical interface.
- The network exchange it runs is sign-up only: the e-mail check and account
  creation. It has no login, no lobby or game-room session, no chat over a
  connection and no icon transfer. The packet types for those can be built
  and parsed, but nothing here drives them.
- `PluginManager` keeps a `plugin_directory`, but it does not load plugin
  files from it. Plugins are added with `add_plugin` and
  `add_default_plugins`.

## Running the tests

Install the `test` extra and run `pytest` from the project root.