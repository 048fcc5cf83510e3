import asyncio
import logging
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol

from chatrunner.app.bot import CommandBot, MessageHandler
from chatrunner.app.config.loader import load_config
from chatrunner.app.config.models import AuthInfo, BotConfig, IncomingMessage
from chatrunner.app.errors import ConnectError, DisconnectError
from chatrunner.app.services import commands_service
from chatrunner.app.services.cooldowns_service import CooldownService

log = logging.getLogger(__name__)


class Transport(Protocol):
    def join(self, channels: Iterable[str]) -> None: ...

    async def say(self, channel_name: str, content: str) -> None: ...

    async def open(self) -> None: ...

    async def shutdown(self) -> None: ...


TransportFactory = Callable[[AuthInfo, MessageHandler], Transport]
ConfigLoader = Callable[[str], BotConfig]


class SessionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RELOADING = "reloading"
    DISCONNECTING = "disconnecting"
    TERMINATED = "terminated"


def twitch_transport(auth: AuthInfo, on_message: MessageHandler) -> Transport:
    return CommandBot(auth, on_message)


class SessionController:
    """Owns the chat connection and reconnects with fresh state on every reload.

    Each pass through ``run_epoch`` loads the configuration again, builds a new
    CooldownService and a new transport, and feeds inbound messages one at a
    time through ``commands_service.dispatch``. The epoch ends on a reload
    request (loop again) or an exit request (stop).
    """

    def __init__(
        self,
        auth: AuthInfo,
        config_path: str,
        transport_factory: TransportFactory = twitch_transport,
        config_loader: ConfigLoader = load_config,
        exec_timeout: Optional[float] = None,
    ) -> None:
        self.auth = auth
        self.config_path = config_path
        self.transport_factory = transport_factory
        self.config_loader = config_loader
        self.exec_timeout = exec_timeout
        self.state = SessionState.IDLE
        self.epochs = 0
        self.config: Optional[BotConfig] = None
        self.cooldowns: Optional[CooldownService] = None
        self.transport: Optional[Transport] = None
        self._exit_requested = asyncio.Event()

    def request_exit(self) -> None:
        log.info("Exit requested")
        self._exit_requested.set()

    async def run(self) -> None:
        while await self.run_epoch():
            pass

    async def run_epoch(self) -> bool:
        """Run one connection epoch; return True when a reload was requested."""
        self.state = SessionState.CONNECTING
        config = self.config_loader(self.config_path)
        cooldowns = CooldownService()
        reload_requested = asyncio.Event()
        inbox: asyncio.Queue[IncomingMessage] = asyncio.Queue()

        transport = self.transport_factory(self.auth, inbox.put_nowait)
        transport.join(config.channels)
        self.config, self.cooldowns, self.transport = config, cooldowns, transport
        self.epochs += 1
        log.info(
            "Starting session %d: %d channel(s), %d command(s)",
            self.epochs,
            len(config.channels),
            len(config.commands),
        )

        worker = asyncio.create_task(self._consume(inbox, config, cooldowns, transport, reload_requested.set))
        connector = asyncio.create_task(self._connect(transport))
        reload_wait = asyncio.create_task(reload_requested.wait())
        exit_wait = asyncio.create_task(self._exit_requested.wait())
        self.state = SessionState.CONNECTED

        try:
            pending = {connector, reload_wait, exit_wait}
            while reload_wait in pending and exit_wait in pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                if connector in done:
                    connector.result()
        except ConnectError:
            self.state = SessionState.DISCONNECTING
            await self._shutdown_quietly(transport)
            self.state = SessionState.TERMINATED
            raise
        finally:
            # a running child is still drained and reaped by executor_service; its output is dropped
            for task in (worker, connector, reload_wait, exit_wait):
                task.cancel()

        if self._exit_requested.is_set():
            self.state = SessionState.DISCONNECTING
            await self._shutdown_quietly(transport)
            self.state = SessionState.TERMINATED
            return False

        self.state = SessionState.RELOADING
        log.info("Reloading configuration from %s", self.config_path)
        try:
            await transport.shutdown()
        except DisconnectError:
            self.state = SessionState.TERMINATED
            raise
        return True

    async def _connect(self, transport: Transport) -> None:
        try:
            await transport.open()
        except ConnectError:
            raise
        except Exception:
            log.exception("Error on connect")

    async def _consume(
        self,
        inbox: "asyncio.Queue[IncomingMessage]",
        config: BotConfig,
        cooldowns: CooldownService,
        transport: Transport,
        request_reload: Callable[[], None],
    ) -> None:
        while True:
            message = await inbox.get()
            try:
                await commands_service.dispatch(
                    message,
                    config,
                    cooldowns,
                    transport.say,
                    request_reload,
                    timeout=self.exec_timeout,
                )
            except Exception:
                log.exception("Failed to handle message from %s in %s", message.caller, message.channel)

    async def _shutdown_quietly(self, transport: Transport) -> None:
        try:
            await transport.shutdown()
        except DisconnectError:
            log.exception("Error while disconnecting")
