"""Named initial rows and seed management."""

from typing import Dict, List, Optional, Any
import json
from pathlib import Path

from .bitfield import BitField


ANCHORS = ("left", "right")


class Seed:
    """Represents an initial row pattern.

    Cell offsets are counted from the left edge, or from the right edge when
    ``anchor`` is ``"right"``, so a seed can be placed on rows of any size.
    """

    def __init__(
        self,
        name: str,
        cells: List[int],
        description: str = "",
        anchor: str = "left",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize a seed.

        Args:
            name: Seed name
            cells: Offsets of living cells
            description: Optional description
            anchor: Edge the offsets are measured from ("left" or "right")
            metadata: Optional metadata dictionary

        Raises:
            ValueError: If anchor is not "left" or "right"
        """
        if anchor not in ANCHORS:
            raise ValueError(f"Unknown anchor '{anchor}' (expected 'left' or 'right')")
        self.name = name
        self.cells = list(cells)
        self.description = description
        self.anchor = anchor
        self.metadata = metadata or {}

    def resolve(self, size: int) -> List[int]:
        """Get the living cell indices for a row of the given size.

        Cells that fall outside the row are dropped.
        """
        if self.anchor == "right":
            indices = [size - 1 - offset for offset in self.cells]
        else:
            indices = list(self.cells)
        return sorted(index for index in indices if 0 <= index < size)

    def apply_to_field(self, field: BitField) -> None:
        """Clear a field and set this seed's cells alive."""
        field.clear()
        for index in self.resolve(field.size):
            field.set_cell(index, True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert seed to dictionary for serialization."""
        return {
            "name": self.name,
            "cells": self.cells,
            "description": self.description,
            "anchor": self.anchor,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Seed":
        """Create seed from dictionary.

        Args:
            data: Dictionary with seed data

        Returns:
            New Seed instance

        Raises:
            KeyError: If name or cells are missing
            ValueError: If the anchor is invalid
        """
        return cls(
            name=data["name"],
            cells=[int(cell) for cell in data["cells"]],
            description=data.get("description", ""),
            anchor=data.get("anchor", "left"),
            metadata=data.get("metadata", {}),
        )

    @classmethod
    def from_field(cls, field: BitField, name: str, description: str = "") -> "Seed":
        """Create a left-anchored seed from the current field state."""
        cells = [index for index, alive in enumerate(field) if alive]
        metadata = {"source_size": field.size, "population": len(cells)}
        return cls(name, cells, description, metadata=metadata)

    def __repr__(self) -> str:
        return f"Seed({self.name!r}, {self.cells!r}, anchor={self.anchor!r})"


class SeedLibrary:
    """Manages a collection of seeds."""

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize seed library.

        Args:
            storage_dir: Directory for stored seeds (defaults to 'seeds')
        """
        self.storage_dir = Path(storage_dir or "seeds")
        self._seeds: Dict[str, Seed] = {}
        self._load_builtin_seeds()

    def _load_builtin_seeds(self) -> None:
        """Load built-in seeds."""
        # Byte blocks {0, 1, 2} on a 24-cell row
        self.add_seed(
            Seed(
                "Reference",
                [15, 22],
                "Blocks 0x00 0x01 0x02 of a 24-cell byte-packed row",
            )
        )

        self.add_seed(
            Seed("Single", [1], "One living cell next to the right boundary", anchor="right")
        )

        self.add_seed(
            Seed("Pair", [1, 2], "Two living cells next to the right boundary", anchor="right")
        )

        self.add_seed(Seed("Left Single", [1], "One living cell next to the left boundary"))

    def add_seed(self, seed: Seed) -> None:
        """Add a seed to the library."""
        self._seeds[seed.name] = seed

    def get_seed(self, name: str) -> Optional[Seed]:
        """Get a seed by name.

        Returns:
            Seed instance or None if not found
        """
        return self._seeds.get(name)

    def list_seeds(self) -> List[str]:
        """Get list of all seed names."""
        return list(self._seeds.keys())

    def get_seeds_by_category(self) -> Dict[str, List[str]]:
        """Get seeds organized by category.

        Returns:
            Dictionary mapping categories to seed name lists
        """
        categories = {
            "Reference": ["Reference"],
            "Triangles": ["Single", "Pair"],
            "Boundary": ["Left Single"],
            "Custom": [],
        }

        all_builtin = set()
        for cat_seeds in categories.values():
            all_builtin.update(cat_seeds)

        for name in self._seeds:
            if name not in all_builtin:
                categories["Custom"].append(name)

        return {cat: seeds for cat, seeds in categories.items() if seeds}

    def save_seed(self, seed: Seed, filename: Optional[str] = None) -> Path:
        """Save a seed to disk.

        Args:
            seed: Seed to save
            filename: Optional filename (defaults to seed name)

        Returns:
            Path of the written file
        """
        if filename is None:
            filename = f"{seed.name.replace(' ', '_').lower()}.json"

        self.storage_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.storage_dir / filename
        with open(filepath, "w") as f:
            json.dump(seed.to_dict(), f, indent=2)
        return filepath

    def load_seed(self, filename: str) -> Seed:
        """Load a seed from disk.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        filepath = self.storage_dir / filename

        with open(filepath, "r") as f:
            data = json.load(f)

        seed = Seed.from_dict(data)
        self.add_seed(seed)
        return seed

    def load_all_seeds(self) -> None:
        """Load all seeds from the storage directory."""
        if not self.storage_dir.exists():
            return
        for filepath in sorted(self.storage_dir.glob("*.json")):
            try:
                self.load_seed(filepath.name)
            except (ValueError, KeyError) as e:
                print(f"Warning: Failed to load seed from {filepath.name}: {e}")

    def save_field_as_seed(
        self,
        field: BitField,
        name: str,
        description: str = "",
        filename: Optional[str] = None,
    ) -> Seed:
        """Save current field state as a new seed.

        Args:
            field: Source field
            name: Seed name
            description: Optional description
            filename: Optional filename for saving

        Returns:
            Created Seed instance
        """
        seed = Seed.from_field(field, name, description)
        self.add_seed(seed)

        if filename is not None:
            self.save_seed(seed, filename)

        return seed
