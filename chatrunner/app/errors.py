from enum import IntEnum


class ExitCode(IntEnum):
    OK = 0
    MISSING_AUTH_PATH = 1
    MISSING_CONFIG_PATH = 2
    BAD_AUTH_FILE = 3
    BAD_CONFIG_FILE = 4
    DISCONNECT_FAILED = 5
    CONNECT_FAILED = 6


class ChatRunnerError(Exception):
    pass


class ConfigError(ChatRunnerError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigReadError(ConfigError):
    """File could not be opened or read."""


class ConfigParseError(ConfigError):
    """File was read but its content is not a valid document."""


class ExecutionError(ChatRunnerError):
    def __init__(self, trigger: str, cause: object) -> None:
        super().__init__(f"command {trigger!r} failed: {cause}")
        self.trigger = trigger
        self.cause = cause


class ConnectError(ChatRunnerError):
    pass


class DisconnectError(ChatRunnerError):
    pass
