import os
import typing

import yaml

DEFAULT_SETTINGS_FILE = os.path.join(os.path.dirname(__file__), "settings.default.yaml")


def _merge(base: typing.Dict[str, typing.Any], override: typing.Dict[str, typing.Any]):
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def load_settings(path: typing.Optional[str] = None) -> typing.Dict[str, typing.Any]:
    """Loads the packaged defaults, overridden by the YAML file at ``path``."""
    with open(DEFAULT_SETTINGS_FILE) as f:
        settings = yaml.safe_load(f)
    if path is not None:
        with open(path) as f:
            settings = _merge(settings, yaml.safe_load(f) or {})
    return settings


class Limits(typing.NamedTuple):
    max_rolls: int
    max_dice_size: int
    max_outcomes: int

    @classmethod
    def from_settings(cls, settings: typing.Dict[str, typing.Any]) -> "Limits":
        limits = settings["limits"]
        return cls(
            int(limits["max_rolls"]),
            int(limits["max_dice_size"]),
            int(limits["max_outcomes"]),
        )
