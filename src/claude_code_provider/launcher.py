"""Process launcher for the claude CLI.

Spawns the CLI with piped stdio, feeds the prompt on stdin, enforces a
wall-clock timeout and returns the captured output. Each run is owned by a
ProcessHandle whose outcome is settled exactly once, whichever of timeout,
collection error or process exit happens first.
"""

from __future__ import annotations

import asyncio
import codecs
import errno
import logging
from pathlib import Path
from time import monotonic

from claude_code_provider.exceptions import (
    ExecutableNotFoundError,
    LaunchFailureError,
    NonZeroExitError,
    ProcessTimeoutError,
)
from claude_code_provider.settings import Settings, settings
from claude_code_provider.types import HandleState, InvocationRequest, InvocationResult

logger = logging.getLogger(__name__)

READ_CHUNK_BYTES = 64 * 1024


def resolve_executable_candidates(config: Settings | None = None) -> tuple[str, ...]:
    """Ordered executables to try: the per-user install, then the bare command.

    Nothing is checked on disk; the spawn itself decides which one exists.
    """
    config = config or settings
    if config.home:
        return (str(Path(config.home) / config.local_install_path), config.command)
    return (config.command,)


async def _read_stream(stream: asyncio.StreamReader) -> str:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    chunks: list[str] = []
    while True:
        data = await stream.read(READ_CHUNK_BYTES)
        if not data:
            chunks.append(decoder.decode(b"", final=True))
            return "".join(chunks)
        chunks.append(decoder.decode(data))


async def _write_input(stdin: asyncio.StreamWriter, payload: str) -> None:
    """Write the whole payload, then EOF. The CLI reads nothing interactively."""
    try:
        stdin.write(payload.encode("utf-8"))
        await stdin.drain()
    except (BrokenPipeError, ConnectionResetError) as e:
        # The child exited before reading its input; its exit status reports why
        logger.debug(f"[LAUNCHER STDIN] Child closed stdin early: {e}")
    finally:
        stdin.close()


class ProcessHandle:
    """One live subprocess, its timeout timer and its single-shot outcome."""

    def __init__(self, process: asyncio.subprocess.Process, executable: str, timeout_ms: int):
        self.process = process
        self.executable = executable
        self.timeout_ms = timeout_ms
        self.state = HandleState.PENDING

        self._loop = asyncio.get_running_loop()
        self._outcome: asyncio.Future[InvocationResult] = self._loop.create_future()
        self._started = monotonic()
        self._timer = self._loop.call_later(timeout_ms / 1000, self._on_timeout)
        self._collector: asyncio.Task[None] | None = None

    @property
    def elapsed_ms(self) -> int:
        return int((monotonic() - self._started) * 1000)

    async def run(self, payload: str) -> InvocationResult:
        """Feed ``payload`` to the child and wait for the settled outcome."""
        self._collector = asyncio.create_task(self._collect(payload))
        self._collector.add_done_callback(self._on_collector_done)
        try:
            return await self._outcome
        except asyncio.CancelledError:
            self._abandon()
            raise

    def _settle(self, result: InvocationResult | None = None, error: BaseException | None = None) -> bool:
        """Record the outcome. Returns False if the handle was already settled."""
        if self.state is HandleState.SETTLED:
            return False
        self.state = HandleState.SETTLED
        self._timer.cancel()
        if self._outcome.done():
            return True
        if error is not None:
            self._outcome.set_exception(error)
        else:
            self._outcome.set_result(result)
        return True

    def _terminate(self) -> None:
        # Fire-and-forget: the child is not awaited after the signal
        try:
            self.process.terminate()
        except ProcessLookupError:
            logger.debug(f"[LAUNCHER KILL] pid={self.process.pid} already exited")
        if self._collector is not None:
            self._collector.cancel()

    def _on_timeout(self) -> None:
        elapsed_ms = self.elapsed_ms
        if self._settle(error=ProcessTimeoutError(elapsed_ms)):
            logger.warning(f"[LAUNCHER TIMEOUT] {self.executable} exceeded {self.timeout_ms}ms, sending SIGTERM")
            self._terminate()

    def _abandon(self) -> None:
        if self.state is HandleState.SETTLED:
            return
        self.state = HandleState.SETTLED
        self._timer.cancel()
        self._outcome.cancel()
        logger.warning(f"[LAUNCHER CANCEL] Invocation cancelled, terminating {self.executable}")
        self._terminate()

    def _on_collector_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"[LAUNCHER IO] Failed while collecting output from {self.executable}: {error}")
            if self._settle(error=error):
                self._terminate()

    async def _collect(self, payload: str) -> None:
        _, stdout, stderr = await asyncio.gather(
            _write_input(self.process.stdin, payload),
            _read_stream(self.process.stdout),
            _read_stream(self.process.stderr),
        )
        exit_code = await self.process.wait()
        execution_time = monotonic() - self._started

        logger.debug(
            f"[LAUNCHER RESULT] {self.executable} finished in {execution_time:.2f}s "
            f"(exit={exit_code}, stdout={len(stdout)} chars, stderr={len(stderr)} chars)"
        )

        if exit_code != 0:
            self._settle(error=NonZeroExitError(exit_code, stderr))
        else:
            self._settle(
                InvocationResult(
                    stdout=stdout,
                    stderr=stderr,
                    executable=self.executable,
                    execution_time=execution_time,
                )
            )


class ProcessLauncher:
    """Runs InvocationRequests, falling back across executable candidates."""

    async def invoke(self, request: InvocationRequest) -> InvocationResult:
        candidates = request.executable_path_candidates

        for index, executable in enumerate(candidates):
            logger.debug(f"[LAUNCHER SPAWN] Attempting to execute Claude CLI at path: {executable}")
            try:
                process = await self._spawn(executable, request.argument_vector)
            except FileNotFoundError as e:
                if index + 1 < len(candidates):
                    logger.debug(
                        f"[LAUNCHER FALLBACK] Claude path {executable} not found, trying '{candidates[index + 1]}'"
                    )
                    continue
                raise ExecutableNotFoundError(candidates) from e
            except OSError as e:
                error_code = errno.errorcode.get(e.errno, type(e).__name__) if e.errno else type(e).__name__
                raise LaunchFailureError(error_code, e.strerror or str(e)) from e

            logger.debug(f"[LAUNCHER SPAWN] Started pid={process.pid} (timeout={request.timeout_ms}ms)")
            handle = ProcessHandle(process, executable, request.timeout_ms)
            return await handle.run(request.input_payload)

        raise ExecutableNotFoundError(candidates)

    async def _spawn(self, executable: str, args: tuple[str, ...]) -> asyncio.subprocess.Process:
        return await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
