import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from chatrunner.app.config.models import BotConfig, CommandSpec, IncomingMessage
from chatrunner.app.errors import ExecutionError
from chatrunner.app.services import executor_service, permissions_service
from chatrunner.app.services.cooldowns_service import CooldownService

log = logging.getLogger(__name__)

SendFunc = Callable[[str, str], Awaitable[None]]
ReloadFunc = Callable[[], None]

NAME_PLACEHOLDER = "$name"
MESSAGE_PLACEHOLDER = "$message"


def resolve_command(commands: Sequence[CommandSpec], text: str) -> Tuple[Optional[CommandSpec], List[str]]:
    """Match the first token of text against the configured triggers, in order.

    Returns the first matching command and the tokens after the first one,
    or (None, []) when nothing matches.
    """
    if not text:
        return None, []
    parts = text.split(" ")
    first = parts[0]
    for command in commands:
        if command.command == first or (command.case_insensitive and command.command.lower() == first.lower()):
            return command, parts[1:]
    return None, []


def build_args(template: Sequence[str], caller: str, rest: Sequence[str]) -> List[str]:
    args = []
    for token in template:
        if token == NAME_PLACEHOLDER:
            args.append(caller)
        elif token == MESSAGE_PLACEHOLDER:
            args.append(" ".join(rest))
        else:
            args.append(token)
    return args


async def dispatch(
    message: IncomingMessage,
    config: BotConfig,
    cooldowns: CooldownService,
    send: SendFunc,
    request_reload: ReloadFunc,
    timeout: Optional[float] = None,
) -> None:
    command, rest = resolve_command(config.commands, message.text)
    if command is None:
        return

    if not permissions_service.has_permission(command, message.caller):
        log.debug("%s is not allowed to run %s", message.caller, command.command)
        return

    if command.reload_config:
        log.info("Reload requested by %s via %s", message.caller, command.command)
        request_reload()
        return

    # recorded before running so a slow child still holds the window
    if not cooldowns.check_and_set(command):
        log.debug("%s is in cooldown", command.command)
        return

    args = build_args(command.args, message.caller, rest)
    try:
        output = await executor_service.run_command(command, args, timeout=timeout)
    except ExecutionError as exc:
        log.warning("Error while running command(%s): %s", exc.trigger, exc.cause)
        return

    if not command.output:
        return
    await send(message.channel, output)
