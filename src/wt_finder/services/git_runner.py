"""Asynchronous execution of git commands."""

import asyncio
import codecs
import logging
from collections.abc import Callable, Sequence

from ..models.result import CommandResult, MutationResult
from ..utils.cancellation import CancellationToken
from ..utils.exceptions import GitError

logger = logging.getLogger(__name__)

DEFAULT_MAX_BUFFER = 1024 * 1024
STREAM_CHUNK_SIZE = 4096

LogCallback = Callable[[str], None]


def describe_command(args: Sequence[str]) -> str:
    """Short name of a git invocation for messages, e.g. ``git worktree add``."""
    words = [arg for arg in args[:2] if not arg.startswith("-")]
    return " ".join(["git", *words])


def _terminate(process: asyncio.subprocess.Process) -> None:
    try:
        process.terminate()
    except ProcessLookupError:
        pass  # already exited


class GitRunner:
    """
    Runs the git executable as an asyncio subprocess.

    ``run`` captures output for queries. ``stream`` forwards output as it
    arrives and can be cancelled, for long-running mutations.
    """

    def __init__(
        self,
        git_executable: str = "git",
        timeout: float | None = 30,
        max_buffer: int = DEFAULT_MAX_BUFFER,
    ):
        """
        Initialize the runner.

        Args:
            git_executable: Name or path of the git binary
            timeout: Timeout for captured commands in seconds (None disables it)
            max_buffer: Maximum bytes accepted on stdout or stderr of a captured run
        """
        self.git_executable = git_executable
        self.timeout = timeout
        self.max_buffer = max_buffer

    async def run(self, args: Sequence[str], cwd: str) -> CommandResult:
        """
        Execute a git command and capture its output.

        A non-zero exit status is reported through the result, not raised.

        Args:
            args: Git command arguments (without 'git')
            cwd: Working directory for the command

        Returns:
            CommandResult: Result of the command execution

        Raises:
            GitError: If git cannot be started, times out or overflows the buffer
        """
        command = [self.git_executable, *args]
        command_text = " ".join(command)
        logger.debug(f"Executing Git command: {command_text} in {cwd}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise GitError(
                f"Failed to execute Git command: {e}", command=command_text
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise GitError(
                f"Git command timed out after {self.timeout} seconds: {command_text}",
                command=command_text,
            )
        except asyncio.CancelledError:
            _terminate(process)
            raise

        if len(stdout) > self.max_buffer or len(stderr) > self.max_buffer:
            raise GitError(
                f"Git command output exceeded {self.max_buffer} bytes: {command_text}",
                command=command_text,
                exit_code=process.returncode,
            )

        output = stdout.decode("utf-8", errors="replace")
        error = stderr.decode("utf-8", errors="replace").strip()
        success = process.returncode == 0

        if not success:
            logger.debug(
                f"Git command failed: {command_text}, "
                f"exit code: {process.returncode}, error: {error}"
            )

        return CommandResult(
            success=success, output=output, error=error, exit_code=process.returncode
        )

    async def stream(
        self,
        args: Sequence[str],
        cwd: str,
        on_log: LogCallback | None = None,
        token: CancellationToken | None = None,
    ) -> MutationResult:
        """
        Execute a git command, forwarding its output while it runs.

        Output from stdout and stderr is passed to ``on_log`` in the order it
        is produced and also kept to build the error of a failed run.
        Cancelling ``token`` terminates the process.

        Args:
            args: Git command arguments (without 'git')
            cwd: Working directory for the command
            on_log: Receives each decoded chunk of output
            token: Cancellation token for the operation

        Returns:
            MutationResult: ok, failure with git's output, or the cancelled result
        """
        if token is not None and token.is_cancelled:
            return MutationResult.cancelled()

        command = [self.git_executable, *args]
        command_text = " ".join(command)
        logger.debug(f"Streaming Git command: {command_text} in {cwd}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning(f"Failed to start {command_text}: {e}")
            return MutationResult.failure(str(e))

        captured: list[str] = []

        def emit(text: str) -> None:
            captured.append(text)
            if on_log is not None:
                on_log(text)

        async def pump(stream: asyncio.StreamReader) -> None:
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            while True:
                data = await stream.read(STREAM_CHUNK_SIZE)
                if not data:
                    break
                text = decoder.decode(data)
                if text:
                    emit(text)
            tail = decoder.decode(b"", final=True)
            if tail:
                emit(tail)

        async def finish() -> int:
            await asyncio.gather(pump(process.stdout), pump(process.stderr))
            return await process.wait()

        loop = asyncio.get_running_loop()
        cancel_requested = asyncio.Event()
        unregister = (
            token.add_callback(lambda: loop.call_soon_threadsafe(cancel_requested.set))
            if token is not None
            else None
        )

        completion = asyncio.ensure_future(finish())
        cancellation = asyncio.ensure_future(cancel_requested.wait())
        try:
            await asyncio.wait(
                {completion, cancellation}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            _terminate(process)
            completion.cancel()
            raise
        finally:
            if unregister is not None:
                unregister()
            cancellation.cancel()

        if not completion.done():
            _terminate(process)
            completion.cancel()
            try:
                await completion
            except asyncio.CancelledError:
                pass
            await process.wait()
            logger.info(f"Cancelled: {command_text}")
            return MutationResult.cancelled()

        exit_code = completion.result()
        if exit_code == 0:
            return MutationResult.ok()

        message = "".join(captured).strip()
        if not message:
            message = f"{describe_command(args)} exited with {exit_code}"
        logger.warning(f"Git command failed: {command_text}, exit code: {exit_code}")
        return MutationResult.failure(message)
