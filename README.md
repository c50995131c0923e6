# loxwalk

loxwalk is a tree-walking interpreter for Lox, a small dynamically typed
scripting language. It supports variables, blocks, `if`/`else`, `while` and
`for` loops, `break` and `continue`, functions with closures, and the native
`clock()` function. It has no dependencies outside the standard library.

## Installation

```
pip install .
```

## Running scripts

Run a script file:

```
loxwalk script.lox
```

The exit status is 0 on success and 65 if any error was reported. If you pass
more than one argument, loxwalk prints a usage message and exits with status 64.

To start an interactive session, run the command with no arguments:

```
loxwalk
```

Each line you type is run as it is entered, and variables and functions stay
defined between lines. Press end-of-file (Ctrl-D) to leave.

## The language

```
var greeting = "hello";
print greeting + ", world";

fun add(a, b) {
    return a + b;
}
print add(1, 2);

for (var i = 0; i < 3; i = i + 1) {
    print i;
}
```

Statements end with a semicolon and `//` starts a comment that runs to the end
of the line. Keywords are recognised regardless of letter case.

- `print` writes strings as they are; other values are written as `nil`,
  `true`/`false`, numbers (whole numbers without a decimal point) or
  `<function 'name'>` / `<native function 'name'>`.
- `=` assigns to a variable and gives the new value. `name : value` also
  assigns, but gives the value the variable held before.
- `+` adds numbers or joins strings. If only one side is a string, the other
  side is turned into text first. Comparison and arithmetic operators need
  numbers on both sides; using them on other values reports an error.
- `==` and `!=` compare values; values of different kinds are never equal, and
  functions are equal only to themselves.
- `and` and `or` short-circuit and give back one of their operands.
- Truth is unusual: `nil` and `false` are false, `true` is true, a number is
  true only when it is zero, a string is true only when it is empty, and
  functions are true.
- A call must pass exactly as many arguments as the function takes, and at
  most 255.

## Using it from Python

```python
from loxwalk.lox import Lox

status = Lox().exec('print "hi";')
```

`Lox(out=None, err=None)` takes optional text streams for program output and
error messages; by default they go to standard output and standard error.
`Lox.exec` runs a whole program and returns the exit status. `Lox.repl` reads
lines from any text stream. `Lox.run` runs source text against an
`Interpreter` you already have, so that state is kept between calls.
`loxwalk.lox.main(argv=None)` is the command-line entry point.

The lower-level parts are also available: `loxwalk.scanner.scan`,
`loxwalk.parser.Parser`, `loxwalk.resolver.Resolver` and
`loxwalk.interpreter.Interpreter`, with the syntax trees in `loxwalk.expr` and
`loxwalk.stmt`. Errors are reported as `[line:col] Error: message`.

## What it does not do

`class`, `this` and `super` are reserved words, but there are no classes or
objects. The only built-in function is `clock()`, which returns the seconds
since the Unix epoch. Parsing stops at the first statement with a syntax error.