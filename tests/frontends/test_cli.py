"""Tests for the CLI frontend."""

import argparse
from unittest.mock import patch
from io import StringIO

import pytest
from rule110.core.bitfield import BitField
from rule110.core.config import AutomatonConfig
from rule110.core.render import render
from rule110.frontends.cli import (
    CLIAutomaton,
    create_parser,
    format_finish_reason,
    parse_cell_list,
    print_results,
    validate_args,
    main,
)


@pytest.fixture
def cli(tmp_path):
    return CLIAutomaton(str(tmp_path / "seeds"))


class TestCLIAutomaton:
    """Test cases for the CLI automaton runner."""

    def test_initialization(self, cli):
        """Test CLI initialization."""
        assert cli.seed_library is not None
        assert "Reference" in cli.seed_library.list_seeds()

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_prints_every_generation(self, mock_stdout, cli):
        """Test a run prints generation 0 plus one row per step."""
        stats = cli.run_simulation(AutomatonConfig(generations=10))

        lines = mock_stdout.getvalue().split("\n")[:-1]
        assert len(lines) == 11
        assert lines[0] == render(BitField.from_blocks([0, 1, 2]))
        assert all(len(line) == 47 for line in lines)
        assert stats["generation"] == 10
        assert stats["initial_population"] == 2

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_verify(self, mock_stdout, cli):
        """Test verification against the reference step finds no mismatches."""
        config = AutomatonConfig(cells=70, block_width=16, generations=40, random_rate=0.4, rng_seed=1)
        stats = cli.run_simulation(config, verify=True, show_rows=False)

        assert stats["verify_mismatches"] == []
        assert "Warning" not in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_verbose(self, mock_stdout, cli):
        """Test verbose output."""
        cli.run_simulation(AutomatonConfig(generations=2), verbose=True, show_rows=False)

        output = mock_stdout.getvalue()
        assert "Rule 110 on 24 cells (3 blocks of 8 bits)" in output
        assert "Initial population: 2 cells" in output

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_until_stable(self, mock_stdout, cli):
        """Test running until a cycle."""
        config = AutomatonConfig(cells=3, alive=[1], generations=50)
        final_gen, reason, stats = cli.run_until_stable(config, show_rows=True)

        assert final_gen == 1
        assert reason == "cycle"
        assert stats["initial_population"] == 1
        assert "Final row (generation 1):" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_list_seeds(self, mock_stdout, cli):
        """Test seed listing."""
        cli.list_seeds()

        output = mock_stdout.getvalue()
        assert "Available seeds:" in output
        assert "Reference:" in output
        assert "Single: 1 cells, right-anchored" in output


class TestArgumentHandling:
    """Test cases for argument parsing and validation."""

    def test_create_parser(self):
        """Test parser defaults."""
        args = create_parser().parse_args([])

        assert args.cells == 24
        assert args.block_width == 8
        assert args.generations == 100
        assert args.rule == 110
        assert args.seed == "Reference"
        assert args.alive is None
        assert args.random is None
        assert not args.verify

    def test_parse_short_args(self):
        """Test short argument forms."""
        args = create_parser().parse_args(["-n", "40", "-b", "32", "-g", "5", "-r", "30", "-p", "0.2", "-s", "-v"])

        assert args.cells == 40
        assert args.block_width == 32
        assert args.generations == 5
        assert args.rule == 30
        assert args.random == 0.2
        assert args.stats
        assert args.verbose

    def test_parse_alive(self):
        """Test living cell lists."""
        args = create_parser().parse_args(["--alive", "3, 7,9"])
        assert args.alive == [3, 7, 9]

    def test_parse_cell_list_invalid(self):
        """Test malformed cell lists."""
        with pytest.raises(argparse.ArgumentTypeError):
            parse_cell_list("3,x")

    def test_invalid_block_width_choice(self):
        """Test block widths outside the choices are rejected by argparse."""
        with patch("sys.stderr", new_callable=StringIO):
            with pytest.raises(SystemExit):
                create_parser().parse_args(["--block-width", "12"])

    def test_validate_args_valid(self):
        """Test validation of valid arguments."""
        assert validate_args(create_parser().parse_args(["-n", "10", "--alive", "1,2"]))

    @patch("sys.stdout", new_callable=StringIO)
    def test_validate_args_invalid(self, mock_stdout):
        """Test validation of invalid arguments."""
        args = create_parser().parse_args(["-n", "10", "--alive", "12", "-r", "999"])

        assert not validate_args(args)
        output = mock_stdout.getvalue()
        assert "Alive cells out of range: 12" in output
        assert "Rule must be between 0 and 255" in output

    @patch("sys.stdout", new_callable=StringIO)
    def test_validate_args_verify_until_stable(self, mock_stdout):
        """Test --verify is rejected together with --until-stable."""
        args = create_parser().parse_args(["--until-stable", "--verify"])

        assert not validate_args(args)
        assert "--verify can't be combined with --until-stable" in mock_stdout.getvalue()

    def test_format_finish_reason(self):
        """Test finish reason formatting."""
        assert format_finish_reason("extinction", {}) == "Extinction - all cells died"
        assert "length 4" in format_finish_reason("cycle", {"cycle_length": 4, "cycle_start_generation": 2})
        assert "(100)" in format_finish_reason("max_generations", {"generation": 100})
        assert "Unknown" in format_finish_reason("other", {})

    @patch("sys.stdout", new_callable=StringIO)
    def test_print_results(self, mock_stdout):
        """Test result printing in both modes."""
        stats = {
            "rule": 110,
            "size": 24,
            "block_width": 8,
            "initial_population": 2,
            "population": 5,
            "population_density": 5 / 24,
            "population_change_rate": 0.5,
            "extent": (10, 22),
            "generation": 3,
            "duration_seconds": 0.01,
            "generations_per_second": 300,
        }

        print_results(3, "max_generations", stats, verbose=True)
        print_results(3, "max_generations", stats, verbose=False)

        output = mock_stdout.getvalue()
        assert "Living extent: cells 10 to 22" in output
        assert "Population: 2 → 5" in output


class TestMain:
    """Test cases for the main entry point."""

    @patch("sys.stdout", new_callable=StringIO)
    def test_default_run(self, mock_stdout, tmp_path, monkeypatch):
        """Test the default run prints 101 rows of the reference automaton."""
        monkeypatch.chdir(tmp_path)
        with patch("sys.argv", ["rule110-cli"]):
            result = main()

        assert result == 0
        lines = mock_stdout.getvalue().split("\n")[:-1]
        assert len(lines) == 101
        assert lines[0] == render(BitField.from_blocks([0, 1, 2]))
        assert lines[1] == render(BitField.from_cells(24, [14, 15, 21, 22]))
        # Boundary cells stay dead
        assert all(line[0] == " " and line[-1] == " " for line in lines)

    @patch("sys.stdout", new_callable=StringIO)
    def test_list_seeds(self, mock_stdout, tmp_path, monkeypatch):
        """Test --list-seeds."""
        monkeypatch.chdir(tmp_path)
        with patch("sys.argv", ["rule110-cli", "--list-seeds"]):
            assert main() == 0
        assert "Available seeds:" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_invalid_args(self, mock_stdout, tmp_path, monkeypatch):
        """Test invalid arguments return an error code."""
        monkeypatch.chdir(tmp_path)
        with patch("sys.argv", ["rule110-cli", "--cells", "-5"]):
            assert main() == 1
        assert "Cell count must be positive" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_unknown_seed(self, mock_stdout, tmp_path, monkeypatch):
        """Test an unknown seed name."""
        monkeypatch.chdir(tmp_path)
        with patch("sys.argv", ["rule110-cli", "--seed", "Nope"]):
            assert main() == 1
        assert "Seed 'Nope' not found" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_verify_run(self, mock_stdout, tmp_path, monkeypatch):
        """Test --verify on a random row."""
        monkeypatch.chdir(tmp_path)
        argv = ["rule110-cli", "-n", "33", "-b", "16", "-p", "0.5", "--rng-seed", "2", "-g", "20", "--verify", "-s"]
        with patch("sys.argv", argv):
            assert main() == 0
        output = mock_stdout.getvalue()
        assert "Warning" not in output
        assert "Finished after 20 generations" in output

    @patch("sys.stdout", new_callable=StringIO)
    def test_until_stable(self, mock_stdout, tmp_path, monkeypatch):
        """Test --until-stable reports the finish reason."""
        monkeypatch.chdir(tmp_path)
        with patch("sys.argv", ["rule110-cli", "-n", "3", "--alive", "1", "--until-stable"]):
            assert main() == 0
        assert "Cycle detected - length 1" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_until_stable_rejects_verify(self, mock_stdout, tmp_path, monkeypatch):
        """Test --until-stable with --verify exits with an error instead of ignoring --verify."""
        monkeypatch.chdir(tmp_path)
        with patch("sys.argv", ["rule110-cli", "-n", "3", "--alive", "1", "--until-stable", "--verify"]):
            assert main() == 1
        assert "Cycle detected" not in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    @patch("rule110.frontends.cli.CLIAutomaton.run_simulation")
    def test_keyboard_interrupt(self, mock_run, mock_stdout, tmp_path, monkeypatch):
        """Test keyboard interrupt handling."""
        monkeypatch.chdir(tmp_path)
        mock_run.side_effect = KeyboardInterrupt()

        with patch("sys.argv", ["rule110-cli"]):
            assert main() == 1
        assert "interrupted" in mock_stdout.getvalue()
