"""One-dimensional bit-packed cellular automata (rule 110 by default)."""

__version__ = "0.1.0"

from .core.bitfield import BitField
from .core.rules import RULE110, RuleTable
from .core.step import StepEngine
from .core.render import render
from .core.automaton import Automaton
from .core.seeds import Seed, SeedLibrary

__all__ = ["BitField", "RuleTable", "RULE110", "StepEngine", "render", "Automaton", "Seed", "SeedLibrary"]
