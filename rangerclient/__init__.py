"""Client library for a game lobby service: wire protocol, sign-up, profiles, game lists, users and private messages."""

__version__ = "0.1.0"

__all__ = [
    "gamelist",
    "infoview",
    "messaging",
    "plugins",
    "profile",
    "protocol",
    "registration",
    "security",
    "users",
]