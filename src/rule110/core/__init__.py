"""Core automaton logic."""

from .bitfield import BitField, BitView
from .rules import RULE110, RuleTable
from .step import StepEngine, reference_step
from .render import render, render_history
from .seeds import Seed, SeedLibrary
from .automaton import Automaton
from .config import AutomatonConfig

__all__ = [
    "BitField",
    "BitView",
    "RuleTable",
    "RULE110",
    "StepEngine",
    "reference_step",
    "render",
    "render_history",
    "Seed",
    "SeedLibrary",
    "Automaton",
    "AutomatonConfig",
]
