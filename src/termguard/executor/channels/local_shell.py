"""Text channel backed by a long-lived local shell process."""

from __future__ import annotations

import asyncio
import codecs
import logging
from collections.abc import Mapping, Sequence

from termguard.exceptions import ChannelError
from termguard.executor.channel import TextChannel

logger = logging.getLogger(__name__)

DEFAULT_SHELL_ARGS = ("--noprofile", "--norc")
_READ_SIZE = 4096


class LocalShellChannel(TextChannel):
    """Feeds text to a shell's stdin and publishes its merged stdout/stderr."""

    def __init__(
        self,
        shell: str = "bash",
        args: Sequence[str] = DEFAULT_SHELL_ARGS,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__()
        self._shell = shell
        self._args = tuple(args)
        self._cwd = cwd
        self._env = dict(env) if env is not None else None
        self._process: asyncio.subprocess.Process | None = None
        self._reader: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self) -> None:
        if self.running:
            return
        try:
            self._process = await asyncio.create_subprocess_exec(
                self._shell,
                *self._args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=self._cwd,
                env=self._env,
            )
        except OSError as exc:
            raise ChannelError(f"Failed to start shell {self._shell}: {exc}") from exc
        self._reader = asyncio.create_task(self._pump())
        logger.debug("Started shell %s (pid %s)", self._shell, self._process.pid)

    async def send_text(self, text: str) -> None:
        if not self.running or self._process.stdin is None:
            raise ChannelError("Shell is not running")
        self._process.stdin.write(text.encode("utf-8"))
        await self._process.stdin.drain()

    async def close(self, grace_period: float = 2.0) -> None:
        process = self._process
        if process is not None:
            if process.stdin is not None and not process.stdin.is_closing():
                process.stdin.close()
            try:
                await asyncio.wait_for(process.wait(), timeout=grace_period)
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()
        if self._reader is not None:
            await self._reader
            self._reader = None
        self._process = None
        await super().close()

    async def __aenter__(self) -> LocalShellChannel:
        await self.start()
        return self

    async def _pump(self) -> None:
        assert self._process is not None and self._process.stdout is not None
        stdout = self._process.stdout
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            data = await stdout.read(_READ_SIZE)
            if not data:
                break
            text = decoder.decode(data)
            if text:
                self.publish(text)
        tail = decoder.decode(b"", final=True)
        if tail:
            self.publish(tail)
