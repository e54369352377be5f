"""Run configuration for an automaton."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional
import numpy as np

from .bitfield import BLOCK_DTYPES, BitField
from .rules import RuleTable
from .seeds import SeedLibrary


@dataclass
class AutomatonConfig:
    """Configuration for a single automaton run.

    ``alive`` (explicit cell indices) takes precedence over ``random_rate``,
    which takes precedence over the named ``seed``.
    """
    cells: int = 24
    block_width: int = 8
    generations: int = 100
    rule: int = 110
    seed: str = "Reference"
    alive: Optional[List[int]] = None
    random_rate: Optional[float] = None
    rng_seed: Optional[int] = None
    alive_glyph: str = "#"
    dead_glyph: str = " "

    def validate(self) -> List[str]:
        """Check the configuration.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if self.cells <= 0:
            errors.append("Cell count must be positive")

        if self.block_width not in BLOCK_DTYPES:
            errors.append(f"Block width must be one of {sorted(BLOCK_DTYPES)}")

        if self.generations < 0:
            errors.append("Generations must be non-negative")

        if not 0 <= self.rule <= 255:
            errors.append("Rule must be between 0 and 255")

        if self.random_rate is not None and not 0.0 <= self.random_rate <= 1.0:
            errors.append("Random population rate must be between 0.0 and 1.0")

        if self.alive is not None:
            bad = [index for index in self.alive if not 0 <= index < self.cells]
            if bad:
                errors.append(f"Alive cells out of range: {', '.join(str(index) for index in bad)}")

        if len(self.alive_glyph) != 1 or len(self.dead_glyph) != 1:
            errors.append("Glyphs must be single characters")

        return errors

    def rule_table(self) -> RuleTable:
        """Rule table for the configured rule number."""
        return RuleTable.from_number(self.rule)

    def build_field(self, library: Optional[SeedLibrary] = None) -> BitField:
        """Create the seeded generation-0 row.

        Args:
            library: Seed library to resolve ``seed`` against

        Returns:
            New BitField

        Raises:
            KeyError: If the named seed doesn't exist
        """
        field = BitField(self.cells, self.block_width)

        if self.alive is not None:
            for index in self.alive:
                field.set_cell(index, True)
        elif self.random_rate is not None:
            field.randomize(self.random_rate, np.random.default_rng(self.rng_seed))
        else:
            library = library or SeedLibrary()
            seed = library.get_seed(self.seed)
            if seed is None:
                raise KeyError(f"Seed '{self.seed}' not found")
            seed.apply_to_field(field)

        return field

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)
