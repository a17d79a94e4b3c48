"""Remote execution tests, using a fake HTTP session."""

import threading

import pytest
import requests

from conftest import make_block
from blockc.execute import (
    MALFORMED_RESPONSE,
    NETWORK_ERROR,
    ExecutionResult,
    PistonExecutor,
    ProgramRunner,
    parse_piston_response,
)


class FakeResponse:
    def __init__(self, status_code: int = 200, data: object = None, reason: str = "OK") -> None:
        self.status_code = status_code
        self.ok = status_code < 400
        self.reason = reason
        self._data = data

    def json(self) -> object:
        if self._data is None:
            raise ValueError("no JSON body")
        return self._data


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict, float]] = []

    def post(self, url: str, json: dict, timeout: float) -> FakeResponse:
        self.calls.append((url, json, timeout))
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


def test_successful_run():
    session = FakeSession(FakeResponse(data={"run": {"stdout": "hi\n", "stderr": "", "code": 0}}))
    executor = PistonExecutor("http://piston.test/execute", session=session)
    result = executor.execute('print("hi")', "python", "x\ny")
    assert result.ok
    assert result.stdout_text == "hi\n"
    url, payload, timeout = session.calls[0]
    assert url == "http://piston.test/execute"
    assert payload == {
        "language": "python",
        "version": "3.10",
        "files": [{"content": 'print("hi")'}],
        "stdin": "x\ny",
    }
    assert timeout == 30.0


def test_compile_error():
    data = {
        "compile": {"stderr": "main.cpp:3: error: expected ';'", "code": 1},
        "run": {"stdout": "", "stderr": "", "code": 0},
    }
    executor = PistonExecutor("http://piston.test", session=FakeSession(FakeResponse(data=data)))
    result = executor.execute("int main() {", "cpp")
    assert result.compilation_failed
    assert not result.runtime_failed
    assert result.exit_code == 1
    assert "expected ';'" in result.stderr_text
    assert result.stdout_text == ""


def test_runtime_error_and_timing():
    data = {"run": {"stdout": "partial", "stderr": "Traceback", "code": 1, "time": 0.25}}
    result = parse_piston_response(data)
    assert result.runtime_failed
    assert not result.compilation_failed
    assert result.exit_code == 1
    assert result.stdout_text == "partial"
    assert result.elapsed_time_ms == pytest.approx(250.0)
    assert not result.ok


def test_transport_failure_is_reported_not_raised():
    session = FakeSession(error=requests.ConnectionError("refused"))
    result = PistonExecutor("http://piston.test", session=session).execute("x", "python")
    assert result.exit_code == 1
    assert result.stderr_text == NETWORK_ERROR


@pytest.mark.parametrize(
    "data,reason,expected",
    [
        ({"message": "rate limited"}, "Too Many Requests", "Execution failed (429): rate limited"),
        (None, "Too Many Requests", "Execution failed (429): Too Many Requests"),
    ],
)
def test_http_error(data: object, reason: str, expected: str):
    session = FakeSession(FakeResponse(429, data, reason))
    result = PistonExecutor("http://piston.test", session=session).execute("x", "cpp")
    assert result.exit_code == 1
    assert result.stderr_text == expected


def test_malformed_body():
    session = FakeSession(FakeResponse(200, None))
    result = PistonExecutor("http://piston.test", session=session).execute("x", "cpp")
    assert result.exit_code == 1
    assert "malformed" in result.stderr_text


def test_unsupported_language_never_posts():
    session = FakeSession(FakeResponse(data={}))
    result = PistonExecutor("http://piston.test", session=session).execute("x", "rust")
    assert result.exit_code == 1
    assert session.calls == []


def test_api_url_from_environment(monkeypatch):
    monkeypatch.setenv("BLOCKC_API_URL", "http://env.test/run")
    assert PistonExecutor(session=FakeSession()).api_url == "http://env.test/run"


def test_result_to_dict():
    result = ExecutionResult(stdout_text="1\n", elapsed_time_ms=12.5)
    assert result.to_dict() == {
        "stdoutText": "1\n",
        "stderrText": "",
        "exitCode": 0,
        "elapsedTimeMs": 12.5,
        "compilationFailed": False,
        "runtimeFailed": False,
    }


class RecordingExecutor:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str | None]] = []

    def execute(self, source_text: str, language: str, stdin: str | None = None) -> ExecutionResult:
        self.calls.append((source_text, language, stdin))
        return ExecutionResult(stdout_text="ok")


def test_runner_refuses_invalid_tree():
    executor = RecordingExecutor()
    outcome = ProgramRunner(executor).run([make_block("print", "p")], "python")
    assert outcome.result is None
    assert [e.block_id for e in outcome.validation_errors] == ["p"]
    assert executor.calls == []


def test_runner_generates_and_sends_stdin():
    executor = RecordingExecutor()
    blocks = [
        make_block("input", "i", variable="name", prompt='"Name"'),
        make_block("print", "p", value="name"),
    ]
    outcome = ProgramRunner(executor).run(blocks, "python", ["Ada"])
    assert outcome.result is not None and outcome.result.stdout_text == "ok"
    source, language, stdin = executor.calls[0]
    assert source == outcome.source_text
    assert 'name = input("Name")' in source
    assert (language, stdin) == ("python", "Ada")


def test_runner_refuses_overlapping_runs():
    entered = threading.Event()
    release = threading.Event()

    class SlowExecutor(RecordingExecutor):
        def execute(self, source_text, language, stdin=None):
            entered.set()
            release.wait(5)
            return super().execute(source_text, language, stdin)

    runner = ProgramRunner(SlowExecutor())
    blocks = [make_block("print", "p", value="1")]
    outcomes = []
    worker = threading.Thread(target=lambda: outcomes.append(runner.run(blocks, "cpp")))
    worker.start()
    assert entered.wait(5)
    assert runner.is_running()
    second = runner.run(blocks, "cpp")
    assert second.busy
    assert second.result is None
    release.set()
    worker.join(5)
    assert outcomes[0].result is not None
    assert not runner.is_running()


@pytest.mark.parametrize(
    "data",
    [
        {"compile": "oops", "run": {"stdout": "", "stderr": "", "code": 0}},
        {"run": ["not", "a", "stage"]},
    ],
)
def test_malformed_stages_are_a_failure_result(data: dict):
    result = parse_piston_response(data)
    assert result.exit_code == 1
    assert result.stderr_text == MALFORMED_RESPONSE
    assert result.error_text == MALFORMED_RESPONSE


def test_non_zero_exit_without_stderr_is_not_a_runtime_error():
    result = parse_piston_response({"run": {"stdout": "", "stderr": "", "code": 3}})
    assert result.exit_code == 3
    assert not result.runtime_failed
    assert not result.ok
    assert result.error_text is None


def test_error_text():
    assert ExecutionResult(stdout_text="fine").error_text is None
    assert ExecutionResult(stderr_text="warning", exit_code=0).error_text is None
    compile_error = parse_piston_response({"compile": {"stderr": "bad"}, "run": {}})
    assert compile_error.error_text == "bad"
    runtime = parse_piston_response({"run": {"stderr": "boom", "code": 1}})
    assert runtime.error_text == "boom"


def test_runner_rejects_unknown_language():
    executor = RecordingExecutor()
    outcome = ProgramRunner(executor).run([make_block("print", "p", value="1")], "rust")
    assert outcome.result is not None
    assert outcome.result.exit_code == 1
    assert "unsupported language 'rust'" in outcome.result.stderr_text
    assert not outcome.busy
    assert executor.calls == []
