import json
import logging
from pathlib import Path
from typing import Any, Tuple

from chatrunner.app.config.models import AuthInfo, BotConfig, CommandSpec
from chatrunner.app.errors import ConfigParseError, ConfigReadError

log = logging.getLogger(__name__)

# JSON key -> (CommandSpec field, expected type)
_COMMAND_FIELDS = {
    "command": ("command", str),
    "executable": ("executable", str),
    "args": ("args", list),
    "permissions": ("permissions", list),
    "output": ("output", bool),
    "reloadConfig": ("reload_config", bool),
    "case-insensitive": ("case_insensitive", bool),
    "timeout": ("timeout", int),
}


def _read_json(path: str) -> Any:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigReadError(path, f"cannot read file ({exc})") from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(path, f"invalid JSON ({exc})") from exc


def _string_list(path: str, where: str, value: Any) -> Tuple[str, ...]:
    if not all(isinstance(item, str) for item in value):
        raise ConfigParseError(path, f"{where} must be a list of strings")
    return tuple(value)


def _parse_command(path: str, index: int, data: Any) -> CommandSpec:
    where = f"commands[{index}]"
    if not isinstance(data, dict):
        raise ConfigParseError(path, f"{where} must be an object")
    values: dict = {}
    for key, (attr, expected) in _COMMAND_FIELDS.items():
        if key not in data or data[key] is None:
            continue
        value = data[key]
        # bool is an int subclass
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ConfigParseError(path, f"{where}.{key} must be {expected.__name__}")
        if expected is list:
            value = _string_list(path, f"{where}.{key}", value)
        values[attr] = value
    if not values.get("command"):
        raise ConfigParseError(path, f"{where}.command is required")
    if not values.get("reload_config") and not values.get("executable"):
        raise ConfigParseError(path, f"{where}.executable is required for {values['command']!r}")
    return CommandSpec(**values)


def normalize_channel(name: str) -> str:
    return name.strip().lstrip("#").lower()


def load_config(path: str) -> BotConfig:
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ConfigParseError(path, "top level must be an object")
    channels = data.get("channels") or []
    commands = data.get("commands") or []
    if not isinstance(channels, list):
        raise ConfigParseError(path, "channels must be a list")
    if not isinstance(commands, list):
        raise ConfigParseError(path, "commands must be a list")
    channels = tuple(normalize_channel(c) for c in _string_list(path, "channels", channels) if c.strip())
    config = BotConfig(
        channels=channels,
        commands=tuple(_parse_command(path, i, item) for i, item in enumerate(commands)),
    )
    log.debug("Loaded %d channel(s) and %d command(s) from %s", len(config.channels), len(config.commands), path)
    return config


def load_auth(path: str) -> AuthInfo:
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ConfigParseError(path, "top level must be an object")
    username = data.get("username", "")
    password = data.get("password", "")
    if not isinstance(username, str) or not isinstance(password, str):
        raise ConfigParseError(path, "username and password must be strings")
    if not username or not password:
        raise ConfigParseError(path, "username and password are required")
    return AuthInfo(username=username, password=password)
