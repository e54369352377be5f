"""Elementary (3-neighbor, 2-state) rule tables."""

from typing import Sequence, Tuple
import numpy as np


NUM_NEIGHBORHOODS = 8


def neighborhood_code(left: bool, center: bool, right: bool) -> int:
    """Encode a (left, center, right) triple as ``left*4 + center*2 + right``."""
    return (int(left) << 2) | (int(center) << 1) | int(right)


class RuleTable:
    """Immutable lookup from neighborhood code to the center cell's next state.

    Entry ``k`` is the next state for the neighborhood whose code is ``k``,
    so the table for Wolfram rule ``n`` has entry ``k`` equal to bit ``k`` of ``n``.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Sequence[bool]) -> None:
        """Initialize a rule table.

        Args:
            entries: Next state for each of the 8 neighborhood codes

        Raises:
            ValueError: If there are not exactly 8 entries
        """
        if len(entries) != NUM_NEIGHBORHOODS:
            raise ValueError(f"Rule table needs {NUM_NEIGHBORHOODS} entries, got {len(entries)}")
        self._entries: Tuple[bool, ...] = tuple(bool(entry) for entry in entries)

    @classmethod
    def from_number(cls, rule_number: int) -> "RuleTable":
        """Create the table for a Wolfram rule number.

        Args:
            rule_number: Integer in [0, 255]

        Returns:
            RuleTable for that rule

        Raises:
            ValueError: If rule_number is out of range
        """
        if not 0 <= rule_number <= 255:
            raise ValueError("rule_number must be between 0 and 255")
        return cls([(rule_number >> code) & 1 for code in range(NUM_NEIGHBORHOODS)])

    @property
    def entries(self) -> Tuple[bool, ...]:
        """Next state per neighborhood code."""
        return self._entries

    @property
    def number(self) -> int:
        """Wolfram rule number of this table."""
        return sum(1 << code for code, alive in enumerate(self._entries) if alive)

    def lookup(self, code: int) -> bool:
        """Get the next center state for a neighborhood code."""
        return self._entries[code]

    def flips(self, code: int) -> bool:
        """Whether the center cell changes state for a neighborhood code."""
        return self._entries[code] != bool(code & 0b010)

    def as_array(self) -> np.ndarray:
        """Lookup table of shape (8,) with dtype int8."""
        return np.array(self._entries, dtype=np.int8)

    def __getitem__(self, code: int) -> bool:
        return self._entries[code]

    def __len__(self) -> int:
        return NUM_NEIGHBORHOODS

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleTable):
            return False
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"RuleTable.from_number({self.number})"


RULE110 = RuleTable.from_number(110)
