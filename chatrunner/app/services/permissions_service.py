from chatrunner.app.config.models import CommandSpec


def has_permission(command: CommandSpec, caller: str) -> bool:
    """An empty permission list makes the command public."""
    if not command.permissions:
        return True
    lowercase = caller.lower()
    return any(allowed.lower() == lowercase for allowed in command.permissions)
