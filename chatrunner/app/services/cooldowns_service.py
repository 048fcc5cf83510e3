import time
from typing import Dict, Optional

from chatrunner.app.config.models import CommandSpec


class CooldownService:
    """Last successful invocation per trigger, scoped to one connection epoch."""

    def __init__(self) -> None:
        # trigger -> timestamp
        self.last_invocations: Dict[str, float] = {}

    def is_in_cooldown(self, command: CommandSpec, now: Optional[float] = None) -> bool:
        if command.timeout <= 0:
            return False
        last = self.last_invocations.get(command.command)
        if last is None:
            return False
        now = time.time() if now is None else now
        return last + command.timeout > now

    def record(self, command: CommandSpec, now: Optional[float] = None) -> None:
        self.last_invocations[command.command] = time.time() if now is None else now

    def check_and_set(self, command: CommandSpec, now: Optional[float] = None) -> bool:
        """Return True if command is allowed; records the invocation when allowed."""
        now = time.time() if now is None else now
        if self.is_in_cooldown(command, now):
            return False
        self.record(command, now)
        return True
