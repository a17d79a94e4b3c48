"""blockc command-line entry point."""

from __future__ import annotations

import logging
import sys

from .blocks import LANGUAGES, BlockInstance
from .codegen import generate_code
from .execute import PistonExecutor, ProgramRunner
from .frontend.validate import ValidationError, Validator
from .inputs import extract_input_prompts
from .serialize import load_program
from .tree import BlockTreeError

log = logging.getLogger(__name__)

PHASES: list[str] = [
    "validate",
    "generate",
]

USAGE: str = """\
blockc [OPTIONS] [INPUT] [-o OUTPUT]

Compile a JSON block program to C++ or Python source.

Options:
  --target TARGET     Output language: cpp, python (default: the program's
                      "language", else cpp)
  --stop-at PHASE     Stop after phase: validate, generate
  --all-errors        Report every validation error, not one per statement
  --run               Execute the program on the remote execution service
  --api-url URL       Execution service endpoint (env: BLOCKC_API_URL)
  -v, --verbose       Log debug output to stderr
  -o, --output FILE   Write output to FILE instead of stdout
  --help              Show this help message
"""


class Options:
    """Parsed command-line options."""

    def __init__(self) -> None:
        self.target: str | None = None
        self.stop_at: str | None = None
        self.all_errors: bool = False
        self.run: bool = False
        self.api_url: str | None = None
        self.verbose: bool = False
        self.input_file: str | None = None
        self.output_file: str | None = None


def read_source(input_file: str | None) -> tuple[str, int]:
    """Read source from file or stdin. Returns (source, exit_code) where exit_code 0 means OK."""
    if input_file is not None:
        try:
            with open(input_file, "rb") as f:
                raw = f.read()
        except OSError:
            print("error: cannot open '" + input_file + "'", file=sys.stderr)
            return ("", 1)
    else:
        raw = sys.stdin.buffer.read()
    try:
        return (raw.decode("utf-8"), 0)
    except ValueError:
        print("error: invalid utf-8 in input", file=sys.stderr)
        return ("", 1)


def write_output(output: str, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is not None:
        try:
            with open(output_file, "w") as f:
                f.write(output + "\n")
        except OSError:
            print("error: cannot write '" + output_file + "'", file=sys.stderr)
            return 1
        return 0
    print(output)
    return 0


def _print_errors(errors: list[ValidationError], file: object = None) -> None:
    for error in errors:
        print(str(error), file=file if file is not None else sys.stderr)


def _validate(blocks: list[BlockInstance], all_errors: bool) -> list[ValidationError]:
    return Validator(exhaustive=all_errors).validate(blocks).errors()


def run_program(blocks: list[BlockInstance], target: str, opts: Options) -> int:
    """Execute remotely, prompting once per input block. Returns the program's exit code."""
    prompts = extract_input_prompts(blocks)
    if prompts and opts.input_file is None:
        print("error: --run with input blocks needs an INPUT file", file=sys.stderr)
        return 2
    answers: list[str] = []
    for prompt in prompts:
        try:
            answers.append(input(prompt + ": "))
        except EOFError:
            answers.append("")
    runner = ProgramRunner(PistonExecutor(opts.api_url))
    outcome = runner.run(blocks, target, answers)
    if outcome.validation_errors:
        _print_errors(outcome.validation_errors)
        print("error: cannot run a program with validation errors", file=sys.stderr)
        return 1
    result = outcome.result
    if result is None:
        print("error: a run is already in progress", file=sys.stderr)
        return 1
    if result.compilation_failed:
        print("error: compilation failed", file=sys.stderr)
    if result.stdout_text:
        sys.stdout.write(result.stdout_text)
        if not result.stdout_text.endswith("\n"):
            sys.stdout.write("\n")
    if result.stderr_text:
        sys.stderr.write(result.stderr_text)
        if not result.stderr_text.endswith("\n"):
            sys.stderr.write("\n")
    if result.elapsed_time_ms is not None:
        log.info("execution time: %.2fms", result.elapsed_time_ms)
    return result.exit_code


def run_pipeline(source: str, opts: Options) -> tuple[int, str]:
    """Load, validate and generate. Returns (exit_code, output)."""
    try:
        program = load_program(source)
    except BlockTreeError as e:
        print("error: " + e.msg, file=sys.stderr)
        return (1, "")
    target = opts.target or program.language or "cpp"
    blocks = program.blocks
    errors = _validate(blocks, opts.all_errors)
    if opts.stop_at == "validate":
        if errors:
            return (1, "\n".join(str(e) for e in errors))
        return (0, "")
    if opts.run:
        return (run_program(blocks, target, opts), "")
    code = generate_code(blocks, target)
    if errors:
        _print_errors(errors)
        lines = ", ".join(str(n) for n in code.error_line_numbers)
        print("error lines: " + lines, file=sys.stderr)
    return (0, code.source_text)


def parse_args(argv: list[str]) -> Options:
    """Parse command-line arguments. Exits with status 2 on usage errors."""
    opts = Options()
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            sys.exit(0)
        elif arg in ("--target", "--stop-at", "--api-url", "-o", "--output"):
            if i + 1 >= len(argv):
                print("error: " + arg + " requires an argument", file=sys.stderr)
                sys.exit(2)
            value = argv[i + 1]
            if arg == "--target":
                opts.target = value
            elif arg == "--stop-at":
                opts.stop_at = value
            elif arg == "--api-url":
                opts.api_url = value
            else:
                opts.output_file = value
            i += 2
        elif arg == "--all-errors":
            opts.all_errors = True
            i += 1
        elif arg == "--run":
            opts.run = True
            i += 1
        elif arg == "-v" or arg == "--verbose":
            opts.verbose = True
            i += 1
        elif arg.startswith("-") and arg != "-":
            print("error: unknown flag '" + arg + "'", file=sys.stderr)
            sys.exit(2)
        else:
            if opts.input_file is not None:
                print("error: unexpected argument '" + arg + "'", file=sys.stderr)
                sys.exit(2)
            opts.input_file = None if arg == "-" else arg
            i += 1
    if opts.stop_at is not None and opts.stop_at not in PHASES:
        print("error: unknown phase '" + opts.stop_at + "'", file=sys.stderr)
        sys.exit(2)
    if opts.target is not None and opts.target not in LANGUAGES:
        print("error: unknown target '" + opts.target + "'", file=sys.stderr)
        sys.exit(2)
    return opts


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    opts = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if opts.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    source, err = read_source(opts.input_file)
    if err != 0:
        return err
    if not source.strip():
        print("error: no input provided", file=sys.stderr)
        return 2
    exit_code, output = run_pipeline(source, opts)
    if len(output) > 0:
        if opts.stop_at == "validate":
            print(output)
            return exit_code
        write_code = write_output(output, opts.output_file)
        if write_code != 0:
            return write_code
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
