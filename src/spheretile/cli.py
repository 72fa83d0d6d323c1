"""
Command-line interface for the sphere tiling puzzle (spheretile).

This module provides the CLI for generating levels, solving the board,
checking placements, playing interactively and benchmarking level generation.
"""

import argparse
import sys
import json
import random
import time
from typing import Optional, List, Dict, Any
from pathlib import Path

from spheretile.core.base import GameMode, LevelGenerationError
from spheretile.core.config import (
    Config, load_config, create_default_config, validate_config, build_spec
)
from spheretile.core.registry import create_level_source
from spheretile.game.game_core import PlacedPiece, ErrorCode
from spheretile.game.catalog import PuzzleSpec
from spheretile.game.board import occupancy_grid, placement_error
from spheretile.game.variations import VariationCache
from spheretile.game.state import GameState
from spheretile.game.placement import load_layout
from spheretile.game.levels import LevelGenerator
from spheretile.play import PlaySession
from spheretile.utils.display import StatusDisplay, LiveLogger, ProgressDisplay, render_board
from spheretile.utils.logger import SessionLogger, save_results_to_csv, summarize_results


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    modes = [m.value for m in GameMode]

    parser = argparse.ArgumentParser(
        description="spheretile: sphere tiling puzzle engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate the starting layout of level 12
  spheretile generate --level 12 --seed 7

  # Print a full solution of the board
  spheretile solve --seed 7

  # Check whether a piece fits
  spheretile check --piece L --x 2 --y 2 --rotation 90

  # Play in the terminal
  spheretile play --level 1

  # Measure level generation
  spheretile benchmark --num-runs 20 --output results.csv

  # Create default configuration
  spheretile create-config --output config.yaml
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate command
    generate_parser = subparsers.add_parser("generate", help="Generate a starting layout")
    generate_parser.add_argument("--config", "-c", help="Path to configuration file")
    generate_parser.add_argument("--level", "-l", type=int, default=1, help="Level number")
    generate_parser.add_argument("--mode", "-m", choices=modes, default="level", help="Game mode")
    generate_parser.add_argument("--seed", type=int, help="Random seed")
    generate_parser.add_argument("--json", action="store_true", help="Print the layout as JSON")
    generate_parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    # Solve command
    solve_parser = subparsers.add_parser("solve", help="Find a full tiling of the board")
    solve_parser.add_argument("--config", "-c", help="Path to configuration file")
    solve_parser.add_argument("--seed", type=int, help="Random seed")
    solve_parser.add_argument("--json", action="store_true", help="Print the solution as JSON")
    solve_parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    # Check command
    check_parser = subparsers.add_parser("check", help="Check whether a placement is valid")
    check_parser.add_argument("--config", "-c", help="Path to configuration file")
    check_parser.add_argument("--piece", "-p", required=True, help="Piece ID")
    check_parser.add_argument("--x", type=int, required=True, help="Grid x of the placement origin")
    check_parser.add_argument("--y", type=int, required=True, help="Grid y of the placement origin")
    check_parser.add_argument("--rotation", "-r", type=int, default=0, help="Rotation in degrees")
    check_parser.add_argument("--flip", action="store_true", help="Mirror the piece")
    check_parser.add_argument("--layout", help="JSON file with pieces already on the board")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--config", "-c", help="Path to configuration file")
    play_parser.add_argument("--level", "-l", type=int, default=1, help="Starting level")
    play_parser.add_argument("--mode", "-m", choices=modes, default="level", help="Game mode")
    play_parser.add_argument("--seed", type=int, help="Random seed")
    play_parser.add_argument("--no-log", action="store_true", help="Do not write a session log")

    # Benchmark command
    benchmark_parser = subparsers.add_parser("benchmark", help="Benchmark full solution generation")
    benchmark_parser.add_argument("--config", "-c", help="Path to configuration file")
    benchmark_parser.add_argument("--num-runs", "-n", type=int, default=10, help="Number of generated solutions")
    benchmark_parser.add_argument("--seed", type=int, help="Base random seed")
    benchmark_parser.add_argument("--output", "-o", help="Override results CSV path")
    benchmark_parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    # Create config command
    config_parser = subparsers.add_parser("create-config", help="Create default configuration file")
    config_parser.add_argument("--output", "-o", default="config.yaml", help="Output configuration file")
    config_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")

    # Validate config command
    validate_parser = subparsers.add_parser("validate-config", help="Validate configuration file")
    validate_parser.add_argument("config", help="Configuration file to validate")
    validate_parser.add_argument("--strict", action="store_true", help="Treat warnings as errors")

    # List pieces command
    list_parser = subparsers.add_parser("list-pieces", help="List the piece catalog")
    list_parser.add_argument("--config", "-c", help="Path to configuration file")
    list_parser.add_argument("--format", choices=["table", "json"], default="table", help="Output format")

    return parser


def _load_and_validate_config(args, logger) -> Optional[Config]:
    """Load and validate configuration with error handling; defaults when no file is given."""
    config_path = getattr(args, "config", None)
    if not config_path:
        config = Config()
    else:
        try:
            logger.log_action("Loading configuration")
            config = load_config(config_path)
            logger.log_result("Configuration loaded")
        except FileNotFoundError:
            logger.log_error(f"Configuration file not found: {config_path}")
            logger.log_info("Use 'spheretile create-config' to create a default configuration")
            return None
        except Exception as e:
            logger.log_error(f"Configuration error: {e}")
            return None

    issues = validate_config(config)
    errors = [issue for issue in issues if issue.startswith("ERROR")]
    if errors:
        StatusDisplay.print_section("Configuration Errors")
        for error in errors:
            logger.log_error(error.replace("ERROR: ", ""))
        return None
    for warning in issues:
        logger.log_warning(warning)

    if getattr(args, "seed", None) is not None:
        config.level.seed = args.seed
    return config


def _read_layout(path: str, spec: PuzzleSpec) -> GameState:
    """Board from a JSON file holding a list of pieces or {"pieces": [...]}"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    items = data.get("pieces", []) if isinstance(data, dict) else data
    pieces = [PlacedPiece.from_dict(item) for item in items]
    return load_layout(GameState(spec=spec), pieces)


def _print_layout(pieces: List[PlacedPiece], spec: PuzzleSpec, locked: Optional[set] = None):
    print(render_board(occupancy_grid(pieces, spec), locked))
    for p in pieces:
        flip = ", flipped" if p.is_flipped else ""
        print(f"  {p.id}: ({p.x}, {p.y}) rot {p.rotation}{flip}")


def generate_command(args) -> int:
    """Execute generate command."""
    logger = LiveLogger(verbose=getattr(args, "verbose", False))

    try:
        config = _load_and_validate_config(args, logger)
        if config is None:
            return 1
        spec = build_spec(config)
        rng = random.Random(config.level.seed)

        logger.log_action("Generating layout", f"level {args.level}, mode {args.mode}")
        source = create_level_source(args.mode, config, spec, rng, logger=logger)
        layout = source.create_layout(args.level)
        logger.log_result(f"Layout with {len(layout)} locked piece(s)")

        if args.json:
            print(json.dumps(
                {"level": args.level, "mode": args.mode, "pieces": [p.to_dict() for p in layout]},
                indent=2
            ))
        else:
            StatusDisplay.print_header(f"Level {args.level} ({args.mode})")
            _print_layout(layout, spec, {p.id for p in layout})
        return 0

    except LevelGenerationError as e:
        logger.log_error(f"Failed to generate level: {e}")
        return 1
    except Exception as e:
        logger.log_error(f"Failed to generate layout: {e}")
        return 1


def solve_command(args) -> int:
    """Execute solve command."""
    logger = LiveLogger(verbose=getattr(args, "verbose", False))

    try:
        config = _load_and_validate_config(args, logger)
        if config is None:
            return 1
        spec = build_spec(config)

        generator = LevelGenerator(spec, config.level, logger=logger)
        start = time.time()
        solution = generator.generate_full_solution()
        elapsed = time.time() - start

        if args.json:
            print(json.dumps({"pieces": [p.to_dict() for p in solution]}, indent=2))
        else:
            StatusDisplay.print_header("Full Solution")
            _print_layout(solution, spec)
            StatusDisplay.print_results({
                "Pieces": len(solution),
                "Attempts": generator.last_attempts,
                "Time (s)": elapsed,
            }, "Search")
        return 0

    except (LevelGenerationError, ValueError) as e:
        logger.log_error(f"Failed to solve: {e}")
        return 1


def check_command(args) -> int:
    """Execute check command."""
    logger = LiveLogger(verbose=False)

    try:
        config = _load_and_validate_config(args, logger)
        if config is None:
            return 1
        spec = build_spec(config)

        piece_id = args.piece.upper()
        if not spec.get_piece_def(piece_id):
            logger.log_error(f"Piece {piece_id} not found")
            return 1

        state = _read_layout(args.layout, spec) if args.layout else GameState(spec=spec)
        error = placement_error(
            piece_id, args.x, args.y, args.rotation, args.flip, state.board(exclude=piece_id), spec
        )

        StatusDisplay.print_results({
            "Piece": piece_id,
            "Origin": f"({args.x}, {args.y})",
            "Orientation": f"rot {args.rotation}{', flipped' if args.flip else ''}",
            "Valid": error is ErrorCode.OK,
            "Result": error.value,
        }, "Placement Check")
        return 0 if error is ErrorCode.OK else 1

    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        logger.log_error(f"Failed to check placement: {e}")
        return 1


def play_command(args) -> int:
    """Execute play command."""
    logger = LiveLogger(verbose=True)

    config = _load_and_validate_config(args, logger)
    if config is None:
        return 1
    try:
        spec = build_spec(config)
    except (OSError, ValueError) as e:
        logger.log_error(f"Failed to load catalog: {e}")
        return 1

    session_logger = None
    if not args.no_log:
        session_logger = SessionLogger(config.session.log_dir, config.session.session_name)

    session = PlaySession(config, spec, session_logger=session_logger)
    session.level = max(1, min(config.level.max_level, args.level))
    session.mode = GameMode(args.mode)
    session.run()

    if session_logger:
        logger.log_info(f"Session log saved to: {session_logger.run_dir}")
    return 0


def benchmark_command(args) -> int:
    """Execute benchmark command."""
    logger = LiveLogger(verbose=getattr(args, "verbose", False))

    try:
        StatusDisplay.print_header(f"spheretile Benchmark - {args.num_runs} Run{'s' if args.num_runs > 1 else ''}")

        config = _load_and_validate_config(args, logger)
        if config is None:
            return 1
        if args.output:
            config.session.results_csv_path = args.output
        spec = build_spec(config)

        StatusDisplay.print_config({
            "Grid": f"{spec.cols}x{spec.rows}",
            "Pieces": len(spec.pieces),
            "Max Attempts": config.level.max_attempts,
            "Node Budget": config.level.max_nodes,
            "Number of Runs": args.num_runs,
            "Results CSV": config.session.results_csv_path,
        }, "Benchmark Configuration")

        base_seed = config.level.seed if config.level.seed is not None else random.randrange(2 ** 31)
        progress = ProgressDisplay(args.num_runs)
        results = []

        for run in range(args.num_runs):
            seed = base_seed + run
            generator = LevelGenerator(spec, config.level, rng=random.Random(seed))
            start = time.time()
            success = True
            try:
                generator.generate_full_solution()
            except LevelGenerationError:
                success = False
            results.append({
                "run": run,
                "seed": seed,
                "success": success,
                "time_s": time.time() - start,
                "attempts": generator.last_attempts,
            })
            progress.update(run + 1, f"seed {seed}")

        summary = summarize_results(results)
        progress.finish(success=summary.get("success_rate", 0) > 0)

        save_results_to_csv(results, config.session.results_csv_path)
        StatusDisplay.print_results(summary, "Benchmark Summary")
        logger.log_info(f"Results saved to: {config.session.results_csv_path}")
        return 0

    except KeyboardInterrupt:
        logger.log_warning("Benchmark interrupted by user")
        return 1
    except Exception as e:
        logger.log_error(f"Failed to run benchmark: {e}")
        return 1


def create_config_command(args) -> int:
    """Execute create-config command."""
    logger = LiveLogger(verbose=True)

    try:
        StatusDisplay.print_header("Creating Configuration File")

        if Path(args.output).exists() and not args.force:
            logger.log_warning(f"Configuration file already exists: {args.output}")
            if not StatusDisplay.ask_confirmation("Overwrite existing file?"):
                logger.log_info("Configuration creation cancelled")
                return 0

        logger.log_action("Creating configuration")
        create_default_config(args.output)
        logger.log_result(f"Configuration created: {args.output}")

        logger.log_info("Next steps:")
        logger.log_info("1. Set OPENAI_API_KEY to enable challenge mode")
        logger.log_info("2. Validate the configuration: spheretile validate-config " + args.output)
        logger.log_info("3. Play: spheretile play --config " + args.output)
        return 0

    except Exception as e:
        logger.log_error(f"Failed to create config: {e}")
        return 1


def validate_config_command(args) -> int:
    """Execute validate-config command."""
    logger = LiveLogger(verbose=True)

    try:
        StatusDisplay.print_header("Configuration Validation")

        logger.log_action(f"Loading configuration from: {args.config}")
        config = load_config(args.config)
        logger.log_result("Configuration loaded successfully")

        StatusDisplay.print_config({
            "Grid": f"{config.board.cols}x{config.board.rows}",
            "Catalog": config.board.catalog_path or "built-in",
            "Locked Pieces": f"{config.level.max_locked} -> {config.level.min_locked}",
            "Max Level": config.level.max_level,
            "Challenge Model": config.challenge.model_name,
            "Log Dir": config.session.log_dir,
        }, "Configuration Overview")

        issues = validate_config(config)
        errors = [issue for issue in issues if issue.startswith("ERROR")]
        warnings = [issue for issue in issues if not issue.startswith("ERROR")]

        if args.strict and warnings:
            errors.extend(warnings)
            warnings = []

        if errors:
            StatusDisplay.print_section("❌ Configuration Errors")
            for i, error in enumerate(errors, 1):
                logger.log_error(f"{i}. {error.replace('ERROR: ', '')}")
            StatusDisplay.print_results({
                "Status": "❌ FAILED",
                "Errors Found": len(errors),
                "Warnings Found": len(warnings)
            }, "Validation Summary")
            return 1

        if warnings:
            StatusDisplay.print_section("⚠️  Configuration Warnings")
            for i, warning in enumerate(warnings, 1):
                logger.log_warning(f"{i}. {warning}")

        StatusDisplay.print_results({
            "Status": "✓ VALID (with warnings)" if warnings else "✅ PERFECT",
            "Errors Found": 0,
            "Warnings Found": len(warnings)
        }, "Validation Summary")
        return 0

    except FileNotFoundError:
        logger.log_error(f"Configuration file not found: {args.config}")
        return 1
    except Exception as e:
        logger.log_error(f"Failed to validate config: {e}")
        return 1


def list_pieces_command(args) -> int:
    """Execute list-pieces command."""
    logger = LiveLogger(verbose=False)

    try:
        config = _load_and_validate_config(args, logger)
        if config is None:
            return 1
        spec = build_spec(config)
        counts = VariationCache(spec).build_all().counts()

        pieces: List[Dict[str, Any]] = [
            {
                "id": piece.id,
                "color": piece.color,
                "size": piece.size,
                "variations": counts[piece.id],
                "cells": [c.to_tuple() for c in piece.initial_shape],
            }
            for piece in spec.pieces
        ]

        if args.format == "json":
            print(json.dumps({"rows": spec.rows, "cols": spec.cols, "pieces": pieces}, indent=2))
        else:
            StatusDisplay.print_header(f"Piece Catalog ({spec.cols}x{spec.rows})")
            for p in pieces:
                print(f"  • {p['id']:<3} size {p['size']}  variations {p['variations']}  {p['color']}")
            print(f"\n  Total spheres: {spec.total_cells()} / {spec.grid_cells} cells")
        return 0

    except Exception as e:
        logger.log_error(f"Failed to list pieces: {e}")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    try:
        parser = create_parser()
        argv = sys.argv[1:] if argv is None else argv

        if not argv:
            parser.print_help()
            return 1

        args = parser.parse_args(argv)

        # Route to appropriate command handler
        command_handlers = {
            "generate": generate_command,
            "solve": solve_command,
            "check": check_command,
            "play": play_command,
            "benchmark": benchmark_command,
            "create-config": create_config_command,
            "validate-config": validate_config_command,
            "list-pieces": list_pieces_command,
        }

        handler = command_handlers.get(args.command)
        if handler:
            return handler(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user")
        return 1
    except Exception as e:
        print(f"\n❌ Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
