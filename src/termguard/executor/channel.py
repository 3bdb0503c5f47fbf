"""Text channel boundary — the only interface to a live shell session."""

from __future__ import annotations

import abc
from typing import Callable

from termguard.events import Emitter, Subscription


class TextChannel(abc.ABC):
    """A terminal-like session: text goes in, raw output chunks come back."""

    def __init__(self) -> None:
        self._output: Emitter[str] = Emitter("output")

    @abc.abstractmethod
    async def send_text(self, text: str) -> None:
        ...  # pragma: no cover

    def on_output(self, listener: Callable[[str], None]) -> Subscription:
        return self._output.subscribe(listener)

    def publish(self, chunk: str) -> None:
        self._output.fire(chunk)

    async def close(self) -> None:
        self._output.dispose()

    async def __aenter__(self) -> TextChannel:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


ChannelProvider = Callable[[], "TextChannel | None"]
