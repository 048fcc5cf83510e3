"""Utility script to load and print configuration from .env."""

from chatrunner.app.settings import settings


def main() -> None:
    print("CHATRUNNER_AUTH_FILE:", settings.auth_file)
    print("CHATRUNNER_CONFIG_FILE:", settings.config_file)
    print("LOG_LEVEL:", settings.log_level)
    print("EXEC_TIMEOUT_SECONDS:", settings.exec_timeout_seconds or "disabled")
    print("MESSAGE_DELAY_SECONDS:", settings.message_delay_seconds)


if __name__ == "__main__":
    main()
