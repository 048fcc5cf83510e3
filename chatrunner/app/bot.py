import asyncio
import logging
from typing import Callable, Dict, Iterable, List

from twitchio.errors import AuthenticationError
from twitchio.ext import commands

from chatrunner.app.config.models import AuthInfo, IncomingMessage
from chatrunner.app.errors import ConnectError, DisconnectError
from chatrunner.app.settings import settings

log = logging.getLogger(__name__)

MessageHandler = Callable[[IncomingMessage], None]


class CommandBot(commands.Bot):
    """Twitch IRC transport: joins channels, forwards chat lines, relays replies."""

    def __init__(self, auth: AuthInfo, on_message: MessageHandler, message_delay: float | None = None) -> None:
        super().__init__(token=auth.password, prefix="!")
        self.username = auth.username.lower()
        self.message_handler = on_message
        self.message_delay = settings.message_delay_seconds if message_delay is None else message_delay
        self.pending_channels: List[str] = []
        self.message_queues: Dict[str, asyncio.Queue[str]] = {}
        self.sender_tasks: Dict[str, asyncio.Task] = {}

    def join(self, channels: Iterable[str]) -> None:
        for name in channels:
            if name not in self.pending_channels:
                self.pending_channels.append(name)

    async def event_ready(self):
        log.info("Connected to Twitch as %s", self.nick or self.username)
        if self.pending_channels:
            await self.join_channels(self.pending_channels)

    async def event_message(self, message):
        if message.echo or message.author is None:
            return
        self.message_handler(
            IncomingMessage(
                caller=message.author.name,
                channel=message.channel.name,
                text=message.content,
            )
        )

    async def say(self, channel_name: str, content: str) -> None:
        self._ensure_sender(channel_name)
        await self.message_queues[channel_name].put(content)

    def _ensure_sender(self, channel_name: str) -> None:
        if channel_name in self.sender_tasks:
            return
        queue: asyncio.Queue[str] = asyncio.Queue()
        self.message_queues[channel_name] = queue
        self.sender_tasks[channel_name] = asyncio.create_task(self._sender_loop(channel_name, queue))

    async def _sender_loop(self, channel_name: str, queue: asyncio.Queue[str]) -> None:
        """Relay queued output one message at a time, message_delay apart."""
        while True:
            content = await queue.get()
            await self._relay(channel_name, content)
            await asyncio.sleep(self.message_delay)

    async def _relay(self, channel_name: str, content: str) -> None:
        channel = self.get_channel(channel_name)
        if channel is None:
            log.warning("Not joined to %s; dropping message", channel_name)
            return
        try:
            await channel.send(content)
        except Exception:
            log.exception("Failed to send message to %s", channel_name)

    @property
    def is_connected(self) -> bool:
        # _keeper is only set once Client.connect() has authenticated
        return self._closing is not None and self._connection._keeper is not None

    async def open(self) -> None:
        try:
            await self.connect()
        except AuthenticationError as exc:
            raise ConnectError(f"Twitch rejected the credentials for {self.username}: {exc}") from exc

    async def shutdown(self) -> None:
        for task in self.sender_tasks.values():
            task.cancel()
        self.sender_tasks.clear()
        self.message_queues.clear()
        try:
            if self.is_connected:
                await self.close()
            elif self._http.session is not None:
                # connect never finished; Client.close() would touch unset state
                await self._http.session.close()
        except Exception as exc:
            raise DisconnectError(f"Error while disconnecting: {exc}") from exc
