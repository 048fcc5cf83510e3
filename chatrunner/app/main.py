import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional, Sequence

from chatrunner.app.config.loader import load_auth, load_config
from chatrunner.app.errors import ConfigError, ConnectError, DisconnectError, ExitCode
from chatrunner.app.session import SessionController
from chatrunner.app.settings import settings

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chatrunner", description="Run programs from Twitch chat commands.")
    parser.add_argument("--auth", default=settings.auth_file, help="authentication json file")
    parser.add_argument("--config", default=settings.config_file, help="config file")
    return parser


def _install_signal_handlers(controller: SessionController) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, controller.request_exit)
        except NotImplementedError:
            # Windows event loops; Ctrl+C still raises KeyboardInterrupt
            pass


async def run_bot(controller: SessionController) -> ExitCode:
    _install_signal_handlers(controller)
    try:
        await controller.run()
    except ConfigError as exc:
        log.error("Error loading config file: %s", exc)
        return ExitCode.BAD_CONFIG_FILE
    except DisconnectError as exc:
        log.error("Error while disconnecting. %s", exc)
        return ExitCode.DISCONNECT_FAILED
    except ConnectError as exc:
        log.error("Error on connect: %s", exc)
        return ExitCode.CONNECT_FAILED
    return ExitCode.OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    args = build_parser().parse_args(argv)

    if not args.auth:
        log.error("Authentication file is necessary")
        return ExitCode.MISSING_AUTH_PATH
    if not args.config:
        log.error("Config file is necessary")
        return ExitCode.MISSING_CONFIG_PATH

    try:
        auth = load_auth(args.auth)
    except ConfigError as exc:
        log.error("Error loading authentication file: %s", exc)
        return ExitCode.BAD_AUTH_FILE
    try:
        load_config(args.config)
    except ConfigError as exc:
        log.error("Error loading config file: %s", exc)
        return ExitCode.BAD_CONFIG_FILE

    controller = SessionController(auth, args.config, exec_timeout=settings.exec_timeout)
    return asyncio.run(run_bot(controller))


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
