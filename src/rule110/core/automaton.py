"""Driver for a single one-dimensional automaton run."""

from typing import Callable, Deque, Dict, Optional, Tuple
from collections import deque
import numpy as np

from .bitfield import BitField
from .rules import RULE110, RuleTable
from .step import StepEngine


# Generations kept for cycle detection; longer cycles go unnoticed
STATE_HISTORY_SIZE = 1000


class Automaton:
    """Owns one row and advances it generation by generation.

    The row is mutated in place by a StepEngine; the first and last cells
    keep their initial values forever.
    """

    def __init__(self, field: BitField, rule_table: RuleTable = RULE110) -> None:
        """Initialize the automaton.

        Args:
            field: Row to simulate (owned by the automaton from now on)
            rule_table: Rule applied at every step
        """
        self.field = field
        self.engine = StepEngine(rule_table)
        self._generation = 0
        self._population_history: Deque[int] = deque(maxlen=100)
        self._state_history: Deque[Tuple[bytes, int]] = deque(maxlen=STATE_HISTORY_SIZE)
        self._seen_states: Dict[bytes, int] = {}
        self._cycle_detected = False
        self._cycle_length = 0
        self._cycle_start_generation = 0

        self._update_population_history()

    @property
    def rule_table(self) -> RuleTable:
        """Rule applied at every step."""
        return self.engine.rule_table

    @property
    def generation(self) -> int:
        """Current generation number."""
        return self._generation

    @property
    def population(self) -> int:
        """Current number of living cells."""
        return self.field.population

    @property
    def population_history(self) -> list:
        """History of population counts."""
        return list(self._population_history)

    @property
    def cycle_detected(self) -> bool:
        """Whether a cycle has been detected."""
        return self._cycle_detected

    @property
    def cycle_length(self) -> int:
        """Length of detected cycle (0 if no cycle)."""
        return self._cycle_length

    @property
    def cycle_start_generation(self) -> int:
        """Generation where cycle started (0 if no cycle)."""
        return self._cycle_start_generation

    def step(self) -> None:
        """Advance the simulation by one generation."""
        self._check_for_cycles()
        self.engine.transform(self.field)
        self._generation += 1
        self._update_population_history()

    def run(
        self,
        generations: int,
        callback: Optional[Callable[[int, BitField], None]] = None,
    ) -> int:
        """Run a fixed number of generations.

        Args:
            generations: Number of steps to perform
            callback: Called with (generation, field) for the current
                generation and again after every step

        Returns:
            Final generation number
        """
        if callback is not None:
            callback(self._generation, self.field)

        for _ in range(generations):
            self.step()
            if callback is not None:
                callback(self._generation, self.field)

        return self._generation

    def run_until_stable(self, max_generations: int = 10000) -> Tuple[int, str]:
        """Run simulation until the row repeats or dies out.

        Args:
            max_generations: Maximum generations to run

        Returns:
            Tuple of (final_generation, reason) where reason is one of:
            'cycle', 'extinction', 'max_generations'
        """
        for _ in range(max_generations):
            self.step()

            if self.population == 0:
                return self._generation, "extinction"

            self._check_for_cycles()
            if self._cycle_detected:
                return self._generation, "cycle"

        return self._generation, "max_generations"

    def _update_population_history(self) -> None:
        self._population_history.append(self.population)

    def _check_for_cycles(self) -> None:
        """Check if the current state has been seen before (cycle detection)."""
        if self._cycle_detected:
            return

        current_state = self.field.tobytes()

        if current_state in self._seen_states:
            first_occurrence = self._seen_states[current_state]
            if first_occurrence == self._generation:
                return
            self._cycle_detected = True
            self._cycle_length = self._generation - first_occurrence
            self._cycle_start_generation = first_occurrence
            return

        # Forget the oldest state before the deque drops it
        if len(self._state_history) == self._state_history.maxlen:
            oldest_state, oldest_generation = self._state_history[0]
            if self._seen_states.get(oldest_state) == oldest_generation:
                del self._seen_states[oldest_state]

        self._seen_states[current_state] = self._generation
        self._state_history.append((current_state, self._generation))

    def reset(self, clear_field: bool = True) -> None:
        """Reset the simulation.

        Args:
            clear_field: Whether to clear the row as well
        """
        if clear_field:
            self.field.clear()

        self._generation = 0
        self._population_history.clear()
        self._state_history.clear()
        self._seen_states.clear()
        self._cycle_detected = False
        self._cycle_length = 0
        self._cycle_start_generation = 0

        self._update_population_history()

    def get_population_change_rate(self, window_size: int = 10) -> float:
        """Calculate recent population change rate.

        Args:
            window_size: Number of recent generations to consider

        Returns:
            Average population change per generation
        """
        recent_history = list(self._population_history)[-window_size:]
        if len(recent_history) < 2:
            return 0.0

        return float(np.mean(np.diff(recent_history)))

    def save_state(self) -> Dict:
        """Save complete automaton state for serialization.

        Returns:
            Dictionary containing all automaton state
        """
        return {
            "generation": self._generation,
            "cells": self.field.to_list(),
            "size": self.field.size,
            "block_width": self.field.block_width,
            "rule": self.rule_table.number,
            "population_history": list(self._population_history),
            "cycle_detected": self._cycle_detected,
            "cycle_length": self._cycle_length,
            "cycle_start_generation": self._cycle_start_generation,
        }

    def load_state(self, state: Dict) -> None:
        """Load complete automaton state from serialization.

        Args:
            state: Dictionary containing automaton state

        Raises:
            ValueError: If state is incompatible with current row
        """
        if state["size"] != self.field.size:
            raise ValueError(f"Row size mismatch: saved {state['size']} vs current {self.field.size}")

        loaded = BitField.from_list(state["cells"], block_width=self.field.block_width)
        self.field.copy_from(loaded)

        if "rule" in state:
            self.engine = StepEngine(RuleTable.from_number(state["rule"]))

        self._generation = state["generation"]
        self._population_history = deque(state["population_history"], maxlen=100)
        self._cycle_detected = state["cycle_detected"]
        self._cycle_length = state["cycle_length"]
        self._cycle_start_generation = state["cycle_start_generation"]

        # Seen states are not serialized
        self._state_history.clear()
        self._seen_states.clear()

    def get_statistics(self) -> Dict:
        """Get simulation statistics.

        Returns:
            Dictionary with various statistics
        """
        alive = [index for index, cell in enumerate(self.field) if cell]

        return {
            "generation": self._generation,
            "population": len(alive),
            "population_change_rate": self.get_population_change_rate(),
            "population_history": list(self._population_history),
            "population_density": len(alive) / self.field.size,
            "cycle_detected": self._cycle_detected,
            "cycle_length": self._cycle_length,
            "cycle_start_generation": self._cycle_start_generation,
            "size": self.field.size,
            "block_width": self.field.block_width,
            "rule": self.rule_table.number,
            "extent": (alive[0], alive[-1]) if alive else None,
        }
