"""
Validate a command config file and list what it defines.

Usage:
  python -m chatrunner.scripts.check_config [config.json]
Defaults to CHATRUNNER_CONFIG_FILE when no path is given.
"""

import sys

from chatrunner.app.config.loader import load_config
from chatrunner.app.config.models import CommandSpec
from chatrunner.app.errors import ConfigError, ExitCode
from chatrunner.app.settings import settings


def describe(command: CommandSpec) -> str:
    who = ", ".join(command.permissions) if command.permissions else "everyone"
    if command.reload_config:
        action = "reloads config"
    else:
        action = " ".join([command.executable, *command.args])
    flags = []
    if command.case_insensitive:
        flags.append("case-insensitive")
    if command.timeout > 0:
        flags.append(f"cooldown {command.timeout}s")
    if command.output:
        flags.append("relays output")
    suffix = f" [{', '.join(flags)}]" if flags else ""
    return f"{command.command} -> {action} (allowed: {who}){suffix}"


def main() -> int:
    path = sys.argv[1] if len(sys.argv) > 1 else settings.config_file
    if not path:
        print("No config path provided and CHATRUNNER_CONFIG_FILE not set.")
        return ExitCode.MISSING_CONFIG_PATH
    try:
        config = load_config(path)
    except ConfigError as exc:
        print(f"Invalid config: {exc}")
        return ExitCode.BAD_CONFIG_FILE
    print(f"Channels: {', '.join(config.channels) or 'none'}")
    for command in config.commands:
        print(describe(command))
    return ExitCode.OK


if __name__ == "__main__":
    sys.exit(main())
