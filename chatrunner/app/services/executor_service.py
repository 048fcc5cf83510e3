import asyncio
import logging
import os
from typing import Optional, Sequence, Set

from chatrunner.app.config.models import CommandSpec
from chatrunner.app.errors import ExecutionError

log = logging.getLogger(__name__)

# communicate() tasks outlive a cancelled caller so the child is drained and reaped
pending_drains: Set[asyncio.Task] = set()


def _drain(proc: asyncio.subprocess.Process) -> asyncio.Task:
    task = asyncio.create_task(proc.communicate())
    pending_drains.add(task)
    task.add_done_callback(pending_drains.discard)
    return task


async def run_command(command: CommandSpec, args: Sequence[str], timeout: Optional[float] = None) -> str:
    """Run the command's executable and return everything it wrote to stdout.

    stderr is discarded. Raises ExecutionError on spawn failure, non-zero exit
    or, when a timeout is given, on overrun (the child is killed first).
    Without a timeout this waits for the child no matter how long it takes.
    Cancelling the caller does not stop the child: its output is still read
    and discarded until it exits.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            command.executable,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
            env=dict(os.environ),
        )
    except OSError as exc:
        raise ExecutionError(command.command, exc) from exc

    log.debug("Started %s (pid %s) for %s", command.executable, proc.pid, command.command)
    drain = _drain(proc)
    try:
        stdout, _ = await asyncio.wait_for(asyncio.shield(drain), timeout=timeout)
    except asyncio.TimeoutError:
        try:
            proc.kill()
        except ProcessLookupError:
            pass  # exited on its own after the deadline
        await drain
        raise ExecutionError(command.command, f"timed out after {timeout}s")

    if proc.returncode != 0:
        raise ExecutionError(command.command, f"exit status {proc.returncode}")
    return stdout.decode("utf-8", errors="replace")
