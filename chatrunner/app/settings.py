import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    auth_file: str = ""
    config_file: str = ""
    log_level: str = "INFO"
    exec_timeout_seconds: float = 0.0  # <= 0 disables the child process timeout
    message_delay_seconds: float = 1.6  # Twitch limit ~20 msgs / 30s per channel

    @property
    def exec_timeout(self) -> float | None:
        return self.exec_timeout_seconds if self.exec_timeout_seconds > 0 else None

    @staticmethod
    def load() -> "Settings":
        load_dotenv()
        return Settings(
            auth_file=os.getenv("CHATRUNNER_AUTH_FILE", ""),
            config_file=os.getenv("CHATRUNNER_CONFIG_FILE", ""),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            exec_timeout_seconds=_float_env("EXEC_TIMEOUT_SECONDS", 0.0),
            message_delay_seconds=_float_env("MESSAGE_DELAY_SECONDS", 1.6),
        )


settings = Settings.load()
