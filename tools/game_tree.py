#!/usr/bin/env python3
"""
CLI tool for turning scoresheet move lists into checked game trees.

Usage:
    python tools/game_tree.py normalize \\
        moves.json \\
        --output moves.normalized.json

    python tools/game_tree.py validate \\
        tree.json \\
        --output-report data/validation.md

``moves.json`` holds the move-pair interchange format:
    [{"moveNumber": 1, "white": "e4", "black": "e5"}, ...]
``tree.json`` holds a tree snapshot as written by ``normalize --tree``.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chess_gametree.config import TreeConfig
from chess_gametree.convert import MovePair, convert_moves, to_linear
from chess_gametree.oracle import ChessOracle
from chess_gametree.tree import TreeValidator, migrate_legacy_tree, tree_from_dict, tree_to_dict


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def normalize_moves(args):
    """Replay a move list through the engine and write the normalized list."""
    moves_path = Path(args.moves)
    if not moves_path.exists():
        print(f"Error: Move list not found: {moves_path}")
        sys.exit(1)

    with open(moves_path, "r", encoding="utf-8") as f:
        pairs = [MovePair.from_dict(row) for row in json.load(f)]

    config = TreeConfig(start_position=args.fen, accept_uci=not args.san_only)
    result = convert_moves(pairs, config=config)

    for failure in result.failures:
        print(f"Skipped {failure.move_number}. {failure.side.name.lower()} {failure.text!r}: {failure.reason}")

    payload = tree_to_dict(result.tree) if args.tree else [p.to_dict() for p in to_linear(result.tree)]
    text = json.dumps(payload, indent=2)

    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        print(f"\nWrote {len(result.tree.main_line)} plies to {args.output}")
    else:
        print(text)

    if result.failures and args.strict:
        sys.exit(2)


def validate_tree(args):
    """Validate a tree snapshot."""
    tree_path = Path(args.tree)
    if not tree_path.exists():
        print(f"Error: Tree snapshot not found: {tree_path}")
        sys.exit(1)

    with open(tree_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if args.migrate:
        data = migrate_legacy_tree(data)

    tree = tree_from_dict(data)
    report = TreeValidator(ChessOracle()).validate(tree)
    markdown = report.to_markdown()

    if args.output_report:
        Path(args.output_report).write_text(markdown, encoding="utf-8")
    print(markdown)

    if not report.is_valid:
        sys.exit(2)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Normalize move lists or validate game tree snapshots",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    norm_parser = subparsers.add_parser("normalize", help="Normalize a move-pair list")
    norm_parser.add_argument("moves", help="JSON move-pair list")
    norm_parser.add_argument(
        "--output",
        default=None,
        help="Output path (default: stdout)",
    )
    norm_parser.add_argument(
        "--fen",
        default=None,
        help="Start position (default: standard start)",
    )
    norm_parser.add_argument(
        "--san-only",
        action="store_true",
        help="Reject UCI coordinate moves",
    )
    norm_parser.add_argument(
        "--tree",
        action="store_true",
        help="Write the full tree snapshot instead of move pairs",
    )
    norm_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 if any move was skipped",
    )
    norm_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    val_parser = subparsers.add_parser("validate", help="Validate a tree snapshot")
    val_parser.add_argument("tree", help="JSON tree snapshot")
    val_parser.add_argument(
        "--output-report",
        default=None,
        help="Save markdown report to file",
    )
    val_parser.add_argument(
        "--migrate",
        action="store_true",
        help="Rewrite legacy variation shapes before parsing",
    )
    val_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    setup_logging(verbose=args.verbose)

    try:
        if args.command == "normalize":
            normalize_moves(args)
        elif args.command == "validate":
            validate_tree(args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)
    except (OSError, ValueError) as e:
        print(f"\n\nError: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
