"""Command-line interface for one-dimensional automata."""

import argparse
import sys
import time
from typing import List, Optional, Tuple

from ..core.automaton import Automaton
from ..core.bitfield import BLOCK_DTYPES, BitField
from ..core.config import AutomatonConfig
from ..core.render import render
from ..core.seeds import SeedLibrary
from ..core.step import reference_step


class CLIAutomaton:
    """Command-line interface for running automaton simulations."""

    def __init__(self, seed_dir: Optional[str] = None):
        """Initialize CLI interface.

        Args:
            seed_dir: Directory with saved seeds (defaults to 'seeds')
        """
        self.seed_library = SeedLibrary(seed_dir)
        self.seed_library.load_all_seeds()

    def run_simulation(
        self,
        config: AutomatonConfig,
        verify: bool = False,
        verbose: bool = False,
        show_rows: bool = True,
    ) -> dict:
        """Run a fixed number of generations, printing every row.

        Args:
            config: Run configuration
            verify: Check every step against the double-buffered reference
            verbose: Print progress updates
            show_rows: Print the rendered row for each generation

        Returns:
            Statistics dictionary
        """
        field = config.build_field(self.seed_library)
        automaton = Automaton(field, config.rule_table())
        initial_population = automaton.population

        if verbose:
            print(
                f"Rule {config.rule} on {config.cells} cells "
                f"({field.num_blocks} blocks of {config.block_width} bits)"
            )
            print(f"Initial population: {initial_population} cells")

        mismatches: List[int] = []
        expected: Optional[BitField] = None

        def on_generation(generation: int, current: BitField) -> None:
            nonlocal expected
            if show_rows:
                print(self._format_row(current, config))
            if verify:
                if expected is not None and current != expected:
                    mismatches.append(generation)
                expected = reference_step(current, automaton.rule_table)

        start_time = time.time()
        final_generation = automaton.run(config.generations, on_generation)
        duration = time.time() - start_time

        stats = automaton.get_statistics()
        stats["duration_seconds"] = duration
        stats["generations_per_second"] = final_generation / duration if duration > 0 else 0
        stats["initial_population"] = initial_population
        stats["reason"] = "max_generations"
        if verify:
            stats["verify_mismatches"] = mismatches
            if mismatches:
                print(f"Warning: {len(mismatches)} generations differ from the reference step")
            elif verbose:
                print(f"Verified {final_generation} steps against the reference step")

        return stats

    def run_until_stable(
        self,
        config: AutomatonConfig,
        verbose: bool = False,
        show_rows: bool = False,
    ) -> Tuple[int, str, dict]:
        """Run until the row cycles, dies out, or hits the generation limit.

        Args:
            config: Run configuration; ``generations`` is the limit
            verbose: Print progress updates
            show_rows: Show initial and final rows

        Returns:
            Tuple of (final_generation, finish_reason, statistics)
        """
        field = config.build_field(self.seed_library)
        automaton = Automaton(field, config.rule_table())
        initial_population = automaton.population

        if show_rows:
            print("Initial row:")
            print(self._format_row(field, config))

        if verbose:
            print(f"\nRunning simulation (max {config.generations} generations)...")

        start_time = time.time()
        final_generation, reason = automaton.run_until_stable(config.generations)
        duration = time.time() - start_time

        stats = automaton.get_statistics()
        stats["duration_seconds"] = duration
        stats["generations_per_second"] = final_generation / duration if duration > 0 else 0
        stats["initial_population"] = initial_population

        if show_rows:
            print(f"Final row (generation {final_generation}):")
            print(self._format_row(field, config))

        return final_generation, reason, stats

    def _format_row(self, field: BitField, config: AutomatonConfig) -> str:
        return render(field, config.alive_glyph, config.dead_glyph)

    def list_seeds(self) -> None:
        """List available seeds by category."""
        categories = self.seed_library.get_seeds_by_category()

        print("Available seeds:")
        for category, seeds in categories.items():
            print(f"\n{category}:")
            for seed_name in seeds:
                seed = self.seed_library.get_seed(seed_name)
                if seed:
                    print(f"  {seed_name}: {len(seed.cells)} cells, {seed.anchor}-anchored")
                    if seed.description:
                        print(f"    {seed.description}")


def parse_cell_list(value: str) -> List[int]:
    """Parse a comma-separated list of cell indices.

    Raises:
        argparse.ArgumentTypeError: If any entry is not an integer
    """
    try:
        return [int(part.strip()) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid cell list '{value}', expected e.g. '15,22'")


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Run a bit-packed one-dimensional cellular automaton from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 100 generations of rule 110 on 24 cells (reference seed)
  rule110-cli

  # Wider row packed into 64-bit blocks, classic triangle
  rule110-cli --cells 120 --block-width 64 --seed Single

  # Explicit living cells and custom glyphs
  rule110-cli --alive 10,11,30 --alive-glyph '*' --dead-glyph '.'

  # Random row, checked step by step against the double-buffered reference
  rule110-cli -n 80 --random 0.3 --rng-seed 7 --verify

  # Run until the row repeats
  rule110-cli -n 16 --until-stable -g 5000 --verbose
        """,
    )

    # Row configuration
    parser.add_argument("-n", "--cells", type=int, default=24, help="Number of cells (default: 24)")

    parser.add_argument(
        "-b",
        "--block-width",
        type=int,
        default=8,
        choices=sorted(BLOCK_DTYPES),
        help="Bits per storage block (default: 8)",
    )

    parser.add_argument(
        "-r",
        "--rule",
        type=int,
        default=110,
        help="Elementary rule number 0-255 (default: 110)",
    )

    # Seed configuration
    parser.add_argument(
        "--seed",
        type=str,
        default="Reference",
        help="Named seed for generation 0 (default: Reference)",
    )

    parser.add_argument(
        "--alive",
        type=parse_cell_list,
        help="Comma-separated indices of living cells, overrides --seed",
    )

    parser.add_argument(
        "-p",
        "--random",
        type=float,
        help="Random initial population rate 0.0-1.0, overrides --seed",
    )

    parser.add_argument(
        "--rng-seed",
        type=int,
        help="Random seed for reproducible --random rows",
    )

    # Simulation configuration
    parser.add_argument(
        "-g",
        "--generations",
        type=int,
        default=100,
        help="Generations to simulate (default: 100)",
    )

    parser.add_argument(
        "--until-stable",
        action="store_true",
        help="Stop early on a cycle or extinction and print results (--generations is the limit)",
    )

    parser.add_argument(
        "--verify",
        action="store_true",
        help="Check every step against the double-buffered reference step",
    )

    # Output configuration
    parser.add_argument("--alive-glyph", type=str, default="#", help="Glyph for living cells (default: '#')")

    parser.add_argument("--dead-glyph", type=str, default=" ", help="Glyph for dead cells (default: ' ')")

    parser.add_argument(
        "-s",
        "--stats",
        action="store_true",
        help="Print statistics after the run (always on with --until-stable)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print detailed progress information",
    )

    parser.add_argument(
        "--list-seeds",
        action="store_true",
        help="List all available seeds and exit",
    )

    return parser


def config_from_args(args: argparse.Namespace) -> AutomatonConfig:
    """Build a run configuration from parsed arguments."""
    return AutomatonConfig(
        cells=args.cells,
        block_width=args.block_width,
        generations=args.generations,
        rule=args.rule,
        seed=args.seed,
        alive=args.alive,
        random_rate=args.random,
        rng_seed=args.rng_seed,
        alive_glyph=args.alive_glyph,
        dead_glyph=args.dead_glyph,
    )


def validate_args(args: argparse.Namespace) -> bool:
    """Validate command-line arguments.

    Args:
        args: Parsed arguments

    Returns:
        True if arguments are valid
    """
    errors = config_from_args(args).validate()

    if args.until_stable and args.generations <= 0:
        errors.append("Generations must be positive with --until-stable")

    if args.until_stable and args.verify:
        errors.append("--verify can't be combined with --until-stable")

    if errors:
        print("Error: Invalid arguments:")
        for error in errors:
            print(f"  - {error}")
        return False

    return True


def format_finish_reason(reason: str, stats: dict) -> str:
    """Format the simulation finish reason for display.

    Args:
        reason: Finish reason from Automaton.run_until_stable
        stats: Statistics dictionary

    Returns:
        Formatted reason string
    """
    if reason == "extinction":
        return "Extinction - all cells died"
    elif reason == "cycle":
        cycle_len = stats.get("cycle_length", 0)
        cycle_start = stats.get("cycle_start_generation", 0)
        return f"Cycle detected - length {cycle_len}, started at generation {cycle_start}"
    elif reason == "max_generations":
        return f"Generation limit reached ({stats.get('generation', 0)})"
    else:
        return f"Unknown reason: {reason}"


def print_results(final_generation: int, reason: str, stats: dict, verbose: bool) -> None:
    """Print simulation results.

    Args:
        final_generation: Final generation number
        reason: Why the simulation finished
        stats: Statistics dictionary
        verbose: Whether to print the detailed breakdown
    """
    print(f"\nFinished after {final_generation} generations: {format_finish_reason(reason, stats)}")

    if verbose:
        print(f"  Rule: {stats['rule']}")
        print(f"  Row: {stats['size']} cells in {stats['block_width']}-bit blocks")
        print(f"  Initial population: {stats['initial_population']}")
        print(f"  Final population: {stats['population']}")
        print(f"  Population density: {stats['population_density']:.2%}")
        print(f"  Population change rate: {stats['population_change_rate']:+.2f} cells/gen")
        if stats.get("extent"):
            extent = stats["extent"]
            print(f"  Living extent: cells {extent[0]} to {extent[1]}")
        print(f"  Duration: {stats.get('duration_seconds', 0):.3f}s")
    else:
        print(
            "Population: {} → {}, "
            "Duration: {:.3f}s, "
            "Speed: {:.0f} gen/s".format(
                stats["initial_population"],
                stats["population"],
                stats.get("duration_seconds", 0),
                stats.get("generations_per_second", 0),
            )
        )


def main() -> int:
    """Main entry point for CLI interface.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    args = parser.parse_args()

    cli = CLIAutomaton()

    if args.list_seeds:
        cli.list_seeds()
        return 0

    if not validate_args(args):
        return 1

    if args.alive is None and args.random is None and not cli.seed_library.get_seed(args.seed):
        available = cli.seed_library.list_seeds()
        print(f"Error: Seed '{args.seed}' not found")
        print(f"Available seeds: {', '.join(available)}")
        print("Use --list-seeds to see detailed information")
        return 1

    config = config_from_args(args)

    try:
        if args.until_stable:
            final_generation, reason, stats = cli.run_until_stable(
                config, verbose=args.verbose, show_rows=args.verbose
            )
            print_results(final_generation, reason, stats, args.verbose)
            return 0

        stats = cli.run_simulation(config, verify=args.verify, verbose=args.verbose)
        if args.stats:
            print_results(stats["generation"], stats["reason"], stats, args.verbose)

        if stats.get("verify_mismatches"):
            return 1
        return 0

    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
        return 1
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
