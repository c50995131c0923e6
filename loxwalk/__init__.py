"""A tree-walking interpreter for the Lox scripting language: scanner, parser, resolver, interpreter and command-line driver."""

__version__ = "0.1.0"