from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class AuthInfo:
    username: str
    password: str


@dataclass(frozen=True)
class CommandSpec:
    command: str
    executable: str = ""
    args: Tuple[str, ...] = ()
    permissions: Tuple[str, ...] = ()
    output: bool = False
    reload_config: bool = False
    case_insensitive: bool = False
    timeout: int = 0  # cooldown window in seconds


@dataclass(frozen=True)
class BotConfig:
    channels: Tuple[str, ...] = ()
    commands: Tuple[CommandSpec, ...] = ()


@dataclass(frozen=True)
class IncomingMessage:
    caller: str
    channel: str
    text: str
