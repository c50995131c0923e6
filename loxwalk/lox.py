"""Driver that runs scripts and the interactive prompt."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Sequence, TextIO

from loxwalk.interpreter import FlowControl, Interpreter
from loxwalk.parser import Parser
from loxwalk.reporting import ErrorManager
from loxwalk.resolver import Resolver
from loxwalk.scanner import scan

EX_USAGE = 64
EX_DATAERR = 65
USAGE = "Usage: jlox [script]"


class Lox:
    """Runs source text through scanning, parsing, resolving and evaluation."""

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self.errors = ErrorManager(stream=err)
        self._out = out

    def _stdout(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def _stderr(self) -> TextIO:
        return self.errors.stream if self.errors.stream is not None else sys.stderr

    def exec(self, source: str) -> int:
        """Run a whole script; return 65 if any error was ever reported, else 0."""
        interpreter = Interpreter(self.errors, out=self._out)
        self.run(source, interpreter)
        return EX_DATAERR if self.errors.errored else 0

    def repl(self, stream: TextIO, prompt: str = "> ") -> None:
        """Read and run lines from ``stream`` until it runs dry."""
        interpreter = Interpreter(self.errors, out=self._out)
        while True:
            out = self._stdout()
            out.write(prompt)
            out.flush()
            try:
                line = stream.readline()
            except (OSError, UnicodeDecodeError):
                print("Problem loading input into memory", file=self._stderr())
                return
            if not line:
                print(file=out)
                return
            self.run(line, interpreter)

    def run(self, source: str, interpreter: Interpreter) -> None:
        """Run ``source`` against an existing interpreter, keeping its state."""
        tokens = scan(self.errors, source)
        for stmt in Parser(self.errors, tokens).parse():
            Resolver(self.errors, interpreter).resolve(stmt)
            try:
                interpreter.interpret(stmt)
            except FlowControl:
                pass


def main(argv: Sequence[str] | None = None) -> int:
    """Run a script named on the command line, or start the prompt."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print(USAGE)
        return EX_USAGE
    if args:
        source = Path(args[0]).read_text(encoding="utf-8")
        return Lox().exec(source)
    Lox().repl(sys.stdin, "> ")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())