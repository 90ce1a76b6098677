"""Compiler and stack-machine interpreter for the L25 teaching language."""

__version__ = "0.1.0"

__all__ = ["__version__"]