"""Bit-packed row storage for one-dimensional cellular automata."""

from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence
import numpy as np


BLOCK_DTYPES: Dict[int, type] = {
    8: np.uint8,
    16: np.uint16,
    32: np.uint32,
    64: np.uint64,
}


class BitView(NamedTuple):
    """Position of a single cell inside the block array.

    Holds no reference to the field; it is only valid for the field
    (and block width) it was created from.
    """

    block: int
    position: int


class BitField:
    """Fixed-length row of binary cells packed into fixed-width blocks.

    Cells are stored most-significant-bit first: cell ``i`` lives in block
    ``i // W`` at bit ``W - 1 - (i % W)``. Unused low bits of the final block
    are kept at zero and never treated as cells.
    """

    def __init__(self, size: int, block_width: int = 8) -> None:
        """Initialize an all-dead row.

        Args:
            size: Number of cells (fixed for the lifetime of the field)
            block_width: Bits per storage block (8, 16, 32 or 64)

        Raises:
            ValueError: If size is not positive or block width is unsupported
        """
        if size < 1:
            raise ValueError(f"Field size must be positive, got {size}")
        if block_width not in BLOCK_DTYPES:
            raise ValueError(
                f"Unsupported block width {block_width} (expected one of {sorted(BLOCK_DTYPES)})"
            )

        self._size = size
        self._block_width = block_width
        self._dtype = BLOCK_DTYPES[block_width]
        num_blocks = size // block_width + (size % block_width != 0)
        self._blocks = np.zeros(num_blocks, dtype=self._dtype)

        # _masks[p] has only bit p set
        self._masks = np.array([1 << p for p in range(block_width)], dtype=self._dtype)

    @classmethod
    def from_blocks(
        cls, blocks: Sequence[int], size: Optional[int] = None, block_width: int = 8
    ) -> "BitField":
        """Create a field from raw block values.

        Args:
            blocks: Block values, first block holds cells 0..W-1
            size: Number of cells (defaults to every bit of every block)
            block_width: Bits per block

        Returns:
            New BitField with padding bits cleared

        Raises:
            ValueError: If the block count doesn't match size or a value doesn't fit a block
        """
        if size is None:
            size = len(blocks) * block_width

        field = cls(size, block_width)
        if len(blocks) != field.num_blocks:
            raise ValueError(
                f"Expected {field.num_blocks} blocks for {size} cells, got {len(blocks)}"
            )

        limit = 1 << block_width
        for index, value in enumerate(blocks):
            if not 0 <= int(value) < limit:
                raise ValueError(f"Block {index} value {value} doesn't fit in {block_width} bits")
            field._blocks[index] = int(value)

        field._clear_padding()
        return field

    @classmethod
    def from_cells(cls, size: int, alive: Iterable[int], block_width: int = 8) -> "BitField":
        """Create a field with the given cells alive.

        Raises:
            IndexError: If any index is outside the row
        """
        field = cls(size, block_width)
        for index in alive:
            field.set_cell(index, True)
        return field

    @classmethod
    def from_list(cls, values: Sequence[int], block_width: int = 8) -> "BitField":
        """Create a field from a sequence of 0/1 values."""
        field = cls(len(values), block_width)
        field._load(values)
        return field

    @property
    def size(self) -> int:
        """Number of cells."""
        return self._size

    @property
    def block_width(self) -> int:
        """Bits per storage block."""
        return self._block_width

    @property
    def num_blocks(self) -> int:
        """Number of allocated blocks."""
        return len(self._blocks)

    @property
    def blocks(self) -> np.ndarray:
        """Copy of the raw block array."""
        return self._blocks.copy()

    @property
    def population(self) -> int:
        """Get the number of living cells."""
        return sum(bin(int(block)).count("1") for block in self._blocks)

    def view(self, index: int) -> BitView:
        """Get the storage position of a cell.

        Args:
            index: Cell index

        Returns:
            BitView for the cell

        Raises:
            IndexError: If index is out of bounds
        """
        if not 0 <= index < self._size:
            raise IndexError(f"Cell index {index} out of range for {self._size} cells")
        return BitView(index // self._block_width, self._block_width - 1 - (index % self._block_width))

    def get_bit(self, view: BitView) -> bool:
        """Read the cell a view points to."""
        return bool(self._blocks[view.block] & self._masks[view.position])

    def flip_bit(self, view: BitView) -> None:
        """Toggle the cell a view points to."""
        self._blocks[view.block] ^= self._masks[view.position]

    def conditional_flip_bit(self, view: BitView, flip: bool) -> None:
        """Toggle the cell a view points to if ``flip`` is true."""
        if flip:
            self.flip_bit(view)

    def read(self, index: int) -> bool:
        """Get the state of a cell.

        Args:
            index: Cell index

        Returns:
            True if cell is alive, False if dead

        Raises:
            IndexError: If index is out of bounds
        """
        return self.get_bit(self.view(index))

    def flip(self, index: int) -> None:
        """Toggle a cell.

        Raises:
            IndexError: If index is out of bounds
        """
        self.flip_bit(self.view(index))

    def conditional_flip(self, index: int, condition: bool) -> None:
        """Toggle a cell only when ``condition`` is true.

        Raises:
            IndexError: If index is out of bounds
        """
        self.conditional_flip_bit(self.view(index), condition)

    def set_cell(self, index: int, alive: bool) -> None:
        """Set the state of a cell.

        Raises:
            IndexError: If index is out of bounds
        """
        view = self.view(index)
        self.conditional_flip_bit(view, self.get_bit(view) != bool(alive))

    def clear(self) -> None:
        """Clear all cells (set all to dead)."""
        self._blocks.fill(0)

    def randomize(self, probability: float = 0.5, rng: Optional[np.random.Generator] = None) -> None:
        """Randomly populate the row.

        Args:
            probability: Chance each cell will be alive (0.0 to 1.0)
            rng: Random generator (a fresh unseeded one by default)
        """
        if rng is None:
            rng = np.random.default_rng()
        self._load(rng.random(self._size) < probability)

    def copy(self) -> "BitField":
        """Return an independent copy of this field."""
        other = BitField(self._size, self._block_width)
        other._blocks[:] = self._blocks
        return other

    def copy_from(self, other: "BitField") -> None:
        """Copy cell states from another field.

        Raises:
            ValueError: If fields have different sizes or block widths
        """
        if (other.size, other.block_width) != (self._size, self._block_width):
            raise ValueError(
                f"Field layouts don't match: {other.size}x{other.block_width} "
                f"vs {self._size}x{self._block_width}"
            )
        self._blocks[:] = other._blocks

    def to_list(self) -> List[int]:
        """Convert field to a list of 0/1 values."""
        return [int(alive) for alive in self]

    def tobytes(self) -> bytes:
        """Raw block bytes, usable as a hashable state key."""
        return self._blocks.tobytes()

    def _load(self, values: Iterable[int]) -> None:
        self.clear()
        for index, value in enumerate(values):
            if value:
                self.flip(index)

    def _clear_padding(self) -> None:
        padding = self.num_blocks * self._block_width - self._size
        if padding:
            keep = ((1 << self._block_width) - 1) ^ ((1 << padding) - 1)
            self._blocks[-1] &= self._dtype(keep)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[bool]:
        for index in range(self._size):
            yield self.get_bit(self.view(index))

    def __eq__(self, other: object) -> bool:
        """Check if two fields hold the same cells in the same layout."""
        if not isinstance(other, BitField):
            return False
        return (
            self._size == other._size
            and self._block_width == other._block_width
            and np.array_equal(self._blocks, other._blocks)
        )

    def __repr__(self) -> str:
        return f"BitField(size={self._size}, block_width={self._block_width}, population={self.population})"

    def __str__(self) -> str:
        """Render the row with '#' for living cells."""
        from .render import render

        return render(self)
