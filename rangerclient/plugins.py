"""Registry of game plugins known to the client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

log = logging.getLogger(__name__)

CHAT_GAME_CODE = 0
UNKNOWN_GAME_CODE = 0xFFFFFFFF
DEFAULT_PLUGIN_DIRECTORY = "plugins"
DEFAULT_COLOR_PROFILE = "macos.act"


@dataclass
class Plugin:
    """A game the client knows about."""

    game_code: int
    game_name: str
    color_table: bytes | None = None


class PluginManager:
    """Holds the known plugins and the colour table used for their icons."""

    def __init__(self, plugin_directory: str | Path = DEFAULT_PLUGIN_DIRECTORY) -> None:
        self.plugin_directory = Path(plugin_directory)
        self.color_table: bytes | None = None
        self._plugins: list[Plugin] = []

    def add_plugin(self, plugin: Plugin) -> None:
        self._plugins.append(plugin)

    def add_default_plugins(self) -> None:
        """Add the chat plugin and the catch-all plugin for unknown games."""
        self._plugins.append(Plugin(CHAT_GAME_CODE, "Chat"))
        self._plugins.append(Plugin(UNKNOWN_GAME_CODE, "Unknown Game"))

    def load_color_profile(self, path: str | Path = DEFAULT_COLOR_PROFILE) -> bytes | None:
        """Read the colour table file; return its contents, or None if unavailable."""
        self.color_table = None
        path = Path(path)
        if not path.exists():
            log.warning("Color profile could not be found. Icons will not display correctly.")
            return None
        try:
            data = path.read_bytes()
        except OSError:
            log.warning("Color profile could not be loaded. Icons will not display correctly.")
            return None
        self.color_table = data
        log.info("Color profile successfully loaded.")
        return data

    def find_plugin_by_code(self, game_code: int) -> Plugin | None:
        """Return the plugin for a game code, falling back to the unknown-game plugin."""
        fallback = None
        for plugin in self._plugins:
            if plugin.game_code == game_code:
                return plugin
            if plugin.game_code == UNKNOWN_GAME_CODE:
                fallback = plugin
        if fallback is None:
            log.error(
                "Default plugin does not exist. This can cause problems in the "
                "application if a game's plugin isn't found."
            )
        return fallback

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[Plugin]:
        return iter(self._plugins)

    def __getitem__(self, index: int) -> Plugin:
        return self._plugins[index]