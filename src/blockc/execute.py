"""Remote execution of generated programs.

The compiler never runs code itself. An Executor submits source text (and
optional standard input) to an external sandbox and returns a structured
ExecutionResult; transport and service failures are reported in the result,
never raised.

PistonExecutor talks to a Piston-compatible HTTP API. ProgramRunner is the
run gate used by front ends: it refuses invalid trees and overlapping runs.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Protocol

import requests

from .blocks import LANGUAGES, BlockInstance
from .codegen import generate_code
from .frontend.validate import ValidationError, validate_blocks
from .inputs import build_stdin

log = logging.getLogger(__name__)

DEFAULT_API_URL = "https://emkc.org/api/v2/piston/execute"

# Target language -> (Piston language, Piston version)
PISTON_RUNTIMES: dict[str, tuple[str, str]] = {
    "cpp": ("cpp", "*"),
    "python": ("python", "3.10"),
}

NETWORK_ERROR = (
    "Network error: Could not connect to code execution service. "
    "Please check your internet connection."
)

MALFORMED_RESPONSE = "Execution failed: malformed response from execution service"


@dataclass
class ExecutionResult:
    """Outcome of one remote run."""

    stdout_text: str = ""
    stderr_text: str = ""
    exit_code: int = 0
    elapsed_time_ms: float | None = None
    compilation_failed: bool = False
    runtime_failed: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.compilation_failed and not self.runtime_failed

    @property
    def error_text(self) -> str | None:
        """Message to show for a failed run; None when the run succeeded."""
        if self.ok or not self.stderr_text:
            return None
        return self.stderr_text

    def to_dict(self) -> dict[str, object]:
        return {
            "stdoutText": self.stdout_text,
            "stderrText": self.stderr_text,
            "exitCode": self.exit_code,
            "elapsedTimeMs": self.elapsed_time_ms,
            "compilationFailed": self.compilation_failed,
            "runtimeFailed": self.runtime_failed,
        }


def failure(message: str) -> ExecutionResult:
    """Result for a run that never reached the program."""
    return ExecutionResult(stderr_text=message, exit_code=1)


class Executor(Protocol):
    def execute(self, source_text: str, language: str, stdin: str | None = None) -> ExecutionResult:
        ...


def parse_piston_response(data: dict[str, object]) -> ExecutionResult:
    """Map a Piston execute response to an ExecutionResult.

    Compile stderr means compilation failed; a non-zero run code with run
    stderr otherwise means the program failed at runtime.
    """
    compile_stage = data.get("compile") or {}
    run_stage = data.get("run") or {}
    if not isinstance(compile_stage, dict) or not isinstance(run_stage, dict):
        log.warning("execution service returned malformed stages")
        return failure(MALFORMED_RESPONSE)
    compile_error = str(compile_stage.get("stderr") or "")
    stdout = str(run_stage.get("stdout") or "")
    stderr = str(run_stage.get("stderr") or "")
    code = run_stage.get("code")
    exit_code = int(code) if isinstance(code, (int, float)) else 0
    elapsed: float | None = None
    raw_time = run_stage.get("time")
    if raw_time is not None:
        try:
            elapsed = float(raw_time) * 1000
        except (TypeError, ValueError):
            elapsed = None
    if compile_error:
        return ExecutionResult(
            stdout_text="",
            stderr_text=compile_error,
            exit_code=1,
            elapsed_time_ms=elapsed,
            compilation_failed=True,
        )
    return ExecutionResult(
        stdout_text=stdout,
        stderr_text=stderr,
        exit_code=exit_code,
        elapsed_time_ms=elapsed,
        runtime_failed=exit_code != 0 and bool(stderr),
    )


class PistonExecutor:
    """Executor backed by a Piston-compatible HTTP API."""

    def __init__(
        self,
        api_url: str | None = None,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if api_url is None:
            api_url = os.environ.get("BLOCKC_API_URL", DEFAULT_API_URL)
        self.api_url: str = api_url
        self.timeout: float = timeout
        self.session = session if session is not None else requests.Session()

    def execute(self, source_text: str, language: str, stdin: str | None = None) -> ExecutionResult:
        runtime = PISTON_RUNTIMES.get(language)
        if runtime is None:
            return failure("unsupported language '" + language + "'")
        payload = {
            "language": runtime[0],
            "version": runtime[1],
            "files": [{"content": source_text}],
            "stdin": stdin or "",
        }
        log.debug("submitting %d bytes of %s to %s", len(source_text), language, self.api_url)
        try:
            resp = self.session.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("execution service unreachable: %s", e)
            return failure(NETWORK_ERROR)
        if not resp.ok:
            message = _error_message(resp)
            log.warning("execution service returned %s: %s", resp.status_code, message)
            return failure("Execution failed (" + str(resp.status_code) + "): " + message)
        try:
            data = resp.json()
        except ValueError:
            log.warning("execution service returned a non-JSON body")
            return failure(MALFORMED_RESPONSE)
        if not isinstance(data, dict):
            return failure(MALFORMED_RESPONSE)
        return parse_piston_response(data)


def _error_message(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.reason or "unknown error"
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        if message:
            return str(message)
    return resp.reason or "unknown error"


# ---------------------------------------------------------------------------
# Run gate
# ---------------------------------------------------------------------------


@dataclass
class RunOutcome:
    """What happened when a run was requested.

    result is None when the run was refused: validation_errors is non-empty
    for an invalid tree, busy is True when another run was still pending.
    An unsupported language gets a failure result and nothing is submitted.
    """

    source_text: str = ""
    result: ExecutionResult | None = None
    validation_errors: list[ValidationError] = field(default_factory=list)
    busy: bool = False


class ProgramRunner:
    """Submit programs to an executor, one run at a time."""

    def __init__(self, executor: Executor) -> None:
        self.executor = executor
        self._pending = threading.Lock()

    def is_running(self) -> bool:
        return self._pending.locked()

    def run(
        self, blocks: list[BlockInstance], language: str, answers: list[str] | None = None
    ) -> RunOutcome:
        if language not in LANGUAGES:
            return RunOutcome(result=failure("unsupported language '" + language + "'"))
        errors = validate_blocks(blocks)
        if errors:
            return RunOutcome(validation_errors=errors)
        if not self._pending.acquire(blocking=False):
            log.info("run refused: previous run still pending")
            return RunOutcome(busy=True)
        try:
            code = generate_code(blocks, language)
            result = self.executor.execute(code.source_text, language, build_stdin(answers))
        finally:
            self._pending.release()
        return RunOutcome(source_text=code.source_text, result=result)
