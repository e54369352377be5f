"""Frontend interfaces for the automaton."""

from .cli import CLIAutomaton

__all__ = ["CLIAutomaton"]
