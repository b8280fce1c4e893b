import pytest

from rangerclient.plugins import UNKNOWN_GAME_CODE, Plugin, PluginManager


@pytest.fixture
def manager():
    m = PluginManager()
    m.add_default_plugins()
    return m


def test_default_plugins(manager):
    assert [p.game_name for p in manager] == ["Chat", "Unknown Game"]
    assert len(manager) == 2


def test_find_chat(manager):
    assert manager.find_plugin_by_code(0).game_name == "Chat"


def test_unknown_code_falls_back(manager):
    plugin = manager.find_plugin_by_code(1234)
    assert plugin.game_code == UNKNOWN_GAME_CODE


def test_added_plugin_found(manager):
    game = Plugin(12, "Some Game")
    manager.add_plugin(game)
    assert manager.find_plugin_by_code(12) is game
    assert manager[2] is game


def test_no_fallback_without_defaults():
    m = PluginManager()
    m.add_plugin(Plugin(5, "Five"))
    assert m.find_plugin_by_code(6) is None


def test_index_out_of_range(manager):
    assert manager[1].game_name == "Unknown Game"
    with pytest.raises(IndexError) as excinfo:
        manager[5]
    assert excinfo.type is IndexError
    assert len(manager) == 2


def test_plugin_directory_default():
    assert PluginManager().plugin_directory.name == "plugins"


def test_color_profile_loaded(tmp_path):
    path = tmp_path / "colors.act"
    path.write_bytes(b"\x01\x02\x03")
    m = PluginManager()
    assert m.load_color_profile(path) == b"\x01\x02\x03"
    assert m.color_table == b"\x01\x02\x03"


def test_color_profile_missing(tmp_path):
    m = PluginManager()
    assert m.load_color_profile(tmp_path / "missing.act") is None
    assert m.color_table is None