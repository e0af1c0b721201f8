import pytest

from dicebot.settings import Limits, load_settings


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text('token: "abc"\nlimits:\n  max_rolls: 50\n')
    return str(path)


def test_defaults():
    settings = load_settings()

    assert settings["prefix"] == "!"
    assert Limits.from_settings(settings) == Limits(1000, 10201, 8192)


def test_user_file_overrides_defaults(settings_file):
    settings = load_settings(settings_file)

    assert settings["token"] == "abc"
    assert settings["timeout"] == 5
    assert Limits.from_settings(settings) == Limits(50, 10201, 8192)


def test_empty_user_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("")

    assert load_settings(str(path)) == load_settings()
