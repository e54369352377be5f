"""In-place generation step for bit-packed elementary automata."""

from typing import Optional, Sequence, Union
import torch
import torch.nn.functional as F

from .bitfield import BitField, BitView
from .rules import RuleTable, neighborhood_code


# Weights turning a 3-cell window into its neighborhood code
_CODE_KERNEL = torch.tensor([[[4.0, 2.0, 1.0]]], dtype=torch.float32)


class StepEngine:
    """Advances a BitField by one generation without a second row buffer.

    A 3-cell window slides left to right. The next state computed for a
    window's center is held back for one iteration and written when that
    cell has become the window's left edge, right after the last
    neighborhood that needs its old value has been evaluated. Cells 0 and
    N-1 are fixed boundaries and never change.
    """

    def __init__(self, rule_table: Union[RuleTable, Sequence[bool]]) -> None:
        """Initialize the engine.

        Args:
            rule_table: RuleTable, or a sequence of 8 next-state entries

        Raises:
            ValueError: If the table doesn't have exactly 8 entries
        """
        if not isinstance(rule_table, RuleTable):
            rule_table = RuleTable(rule_table)
        self.rule_table = rule_table

    def evaluate(self, field: BitField, left: BitView, center: BitView, right: BitView) -> bool:
        """Look up the next center state for the window at the given views."""
        code = neighborhood_code(field.get_bit(left), field.get_bit(center), field.get_bit(right))
        return self.rule_table.lookup(code)

    def transform(self, field: BitField) -> None:
        """Replace the field's contents with the next generation, in place.

        Args:
            field: Row to advance; borrowed only for the duration of the call
        """
        size = field.size
        if size < 3:
            # No interior cells
            return

        left = field.view(0)
        center = field.view(1)
        right: Optional[BitView] = field.view(2)

        # Cell 0 never changes, so its pending value is its current one
        prev_result = field.get_bit(left)
        curr_result = prev_result

        # i runs one past the last cell; the final pass has no right edge and
        # only flushes the write for cell N-3
        for i in range(3, size + 1):
            curr_result = self.evaluate(field, left, center, right)
            field.conditional_flip_bit(left, prev_result != field.get_bit(left))

            prev_result = curr_result
            left = center
            center = right
            right = field.view(i) if i < size else None

        # Pending write for cell N-2; cell N-1 stays the same
        field.conditional_flip_bit(left, curr_result != field.get_bit(left))


def reference_step(field: BitField, rule_table: RuleTable) -> BitField:
    """Compute the next generation into a fresh field.

    Every neighborhood is read from the unmodified input, so this serves as
    the double-buffered reference for StepEngine.transform. Boundary cells
    are copied unchanged.

    Args:
        field: Current generation (not modified)
        rule_table: Rule to apply

    Returns:
        New BitField holding the next generation
    """
    if field.size < 3:
        return field.copy()

    cells = torch.tensor(field.to_list(), dtype=torch.float32).view(1, 1, -1)
    codes = F.conv1d(cells, _CODE_KERNEL)[0, 0].round().to(torch.int64).numpy()

    next_cells = field.to_list()
    next_cells[1:-1] = rule_table.as_array()[codes].tolist()
    return BitField.from_list(next_cells, block_width=field.block_width)
