"""
Sequential step execution for one-line.

Each step runs as its own shell invocation. Steps run strictly one after
another on the calling thread and the sequence stops at the first failure.
"""
import logging
import os
import subprocess
from typing import Iterator, List, Optional, Sequence

from ..constants import DEFAULT_POSIX_SHELL, DEFAULT_WINDOWS_SHELL
from ..utils import is_windows
from .errors import ErrorType, StepExecutionError
from .models import Command, ExecutionResult, StepCallback, StepOutcome, StepOutput

logger = logging.getLogger(__name__)


def format_step_header(index: int, total: int, step: str) -> str:
    """Transcript header for the step at zero-based ``index``."""
    return f"[Step {index + 1}/{total}] {step}"


class CommandExecutor:
    """
    Runs shell steps and sequences of steps.

    Args:
        shell: Shell executable; /bin/sh (cmd.exe on Windows) when omitted
        timeout: Per-step timeout in seconds; None waits forever
        env: Extra environment variables for every step
    """

    def __init__(
        self,
        shell: Optional[str] = None,
        timeout: Optional[float] = None,
        env: Optional[dict] = None,
    ) -> None:
        self._shell = shell or self._detect_shell()
        self._timeout = timeout
        self._env = dict(env or {})

    @property
    def shell(self) -> str:
        return self._shell

    def _detect_shell(self) -> str:
        """Pick the platform's default shell."""
        if is_windows():
            return os.environ.get("COMSPEC", DEFAULT_WINDOWS_SHELL)
        return DEFAULT_POSIX_SHELL

    def _build_args(self, step: str) -> List[str]:
        shell_name = os.path.basename(self._shell).lower()
        if shell_name in ("cmd", "cmd.exe"):
            return [self._shell, "/c", step]
        if shell_name.startswith(("powershell", "pwsh")):
            return [self._shell, "-Command", step]
        return [self._shell, "-c", step]

    def execute_step(self, step: str, cwd: Optional[str] = None) -> StepOutput:
        """
        Run one step in ``cwd`` (the current directory when None).

        Returns:
            Captured stdout and stderr

        Raises:
            StepExecutionError: If the step cannot start, times out or exits non-zero
        """
        args = self._build_args(step)
        logger.debug(f"Running {step!r} in {cwd or os.getcwd()}")

        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self._timeout,
                cwd=cwd or None,
                env={**os.environ, **self._env},
            )
        except subprocess.TimeoutExpired as e:
            raise StepExecutionError(
                f"Command timed out after {self._timeout} seconds: {step}",
                step=step,
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr),
                timed_out=True,
            ) from e
        except OSError as e:
            raise StepExecutionError(f"Command failed to start: {step}: {e}", step=step) from e

        stdout = result.stdout or ""
        stderr = result.stderr or ""
        if result.returncode != 0:
            message = f"Command failed with exit code {result.returncode}: {step}"
            if stderr.strip():
                message += f"\n{stderr.strip()}"
            raise StepExecutionError(
                message,
                step=step,
                return_code=result.returncode,
                stdout=stdout,
                stderr=stderr,
            )

        return StepOutput(stdout=stdout, stderr=stderr)

    def iter_sequence(
        self,
        steps: Sequence[str],
        cwd: Optional[str] = None,
    ) -> Iterator[StepOutcome]:
        """
        Run ``steps`` in order, yielding one outcome per executed step.

        Step ``i + 1`` does not start until the consumer asks for it, and
        nothing more is yielded after a failed step.
        """
        total = len(steps)
        for index, step in enumerate(steps):
            header = format_step_header(index, total, step)
            try:
                output = self.execute_step(step, cwd).combined
            except StepExecutionError as e:
                logger.info(f"Step {index + 1}/{total} failed: {e.message}")
                yield StepOutcome(
                    index=index,
                    total=total,
                    step=step,
                    success=False,
                    output=e.stdout + e.stderr,
                    record=f"\n{header}\nError: {e.message}\n",
                    error=e.message,
                )
                return
            yield StepOutcome(
                index=index,
                total=total,
                step=step,
                success=True,
                output=output,
                record=f"\n{header}\n{output}\n",
            )

    def execute_sequence(
        self,
        steps: Sequence[str],
        cwd: Optional[str] = None,
        on_step_complete: Optional[StepCallback] = None,
    ) -> ExecutionResult:
        """
        Run ``steps`` in order, stopping at the first failure.

        Args:
            steps: Shell commands
            cwd: Working directory for every step
            on_step_complete: Called with (index, output) after each
                successful step, before the next one starts

        Returns:
            ExecutionResult whose output is the transcript of every executed step
        """
        transcript: List[str] = []
        outcomes: List[StepOutcome] = []

        for outcome in self.iter_sequence(steps, cwd):
            transcript.append(outcome.record)
            outcomes.append(outcome)
            if not outcome.success:
                return ExecutionResult(
                    success=False,
                    output="".join(transcript),
                    error=outcome.error,
                    failed_step=outcome.index,
                    error_type=ErrorType.STEP_EXECUTION,
                    outcomes=outcomes,
                )
            if on_step_complete is not None:
                on_step_complete(outcome.index, outcome.output)

        return ExecutionResult(success=True, output="".join(transcript), outcomes=outcomes)

    def execute_command(
        self,
        command: Command,
        cwd: Optional[str] = None,
        on_step_complete: Optional[StepCallback] = None,
    ) -> ExecutionResult:
        """Run a saved command's steps."""
        return self.execute_sequence(command.steps, cwd, on_step_complete)


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
