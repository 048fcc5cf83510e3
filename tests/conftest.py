# tests/conftest.py
"""Shared pytest fixtures for all test modules.

Provides:
- JSON file writer for config/auth documents
- In-memory chat transport standing in for the Twitch connection
- A polling helper for waiting on background tasks
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Callable, List, Optional

import pytest

from chatrunner.app.config.models import AuthInfo, BotConfig, CommandSpec, IncomingMessage


class FakeTransport:
    """Records what the session asks of the chat connection."""

    def __init__(self, auth: AuthInfo, on_message: Callable[[IncomingMessage], None]) -> None:
        self.auth = auth
        self.on_message = on_message
        self.joined: List[str] = []
        self.sent: List[tuple] = []
        self.opened = False
        self.closed = False
        self.open_error: Optional[BaseException] = None
        self.shutdown_error: Optional[BaseException] = None

    def join(self, channels) -> None:
        self.joined.extend(channels)

    async def say(self, channel_name: str, content: str) -> None:
        self.sent.append((channel_name, content))

    async def open(self) -> None:
        if self.open_error is not None:
            raise self.open_error
        self.opened = True

    async def shutdown(self) -> None:
        self.closed = True
        if self.shutdown_error is not None:
            raise self.shutdown_error

    def deliver(self, caller: str, text: str, channel: str = "testchannel") -> None:
        self.on_message(IncomingMessage(caller=caller, channel=channel, text=text))


class TransportFactory:
    """Builds FakeTransports and applies queued failures to them in order."""

    def __init__(self) -> None:
        self.created: List[FakeTransport] = []
        self.open_errors: List[Optional[BaseException]] = []
        self.shutdown_errors: List[Optional[BaseException]] = []

    def __call__(self, auth: AuthInfo, on_message) -> FakeTransport:
        transport = FakeTransport(auth, on_message)
        index = len(self.created)
        if index < len(self.open_errors):
            transport.open_error = self.open_errors[index]
        if index < len(self.shutdown_errors):
            transport.shutdown_error = self.shutdown_errors[index]
        self.created.append(transport)
        return transport


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the event loop until predicate() holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, Any], str]:
    """Write a JSON document under tmp_path and return its path."""

    def _write(name: str, data: Any) -> str:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def auth() -> AuthInfo:
    return AuthInfo(username="testbot", password="oauth:abc123")


@pytest.fixture
def transport_factory() -> TransportFactory:
    return TransportFactory()


@pytest.fixture
def ping_config() -> BotConfig:
    return BotConfig(
        channels=("testchannel",),
        commands=(
            CommandSpec(command="!ping", executable="echo", args=("pong",), output=True, timeout=30),
            CommandSpec(command="!reload", reload_config=True, permissions=("alice",)),
        ),
    )


@pytest.fixture
def wait_until() -> Callable:
    return _wait_until
