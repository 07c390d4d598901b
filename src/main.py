"""
Main entry point for running a simulated typing session.

Usage:
    python -m src.main config.yaml
    python -m src.main config.yaml --output results/run1.json --verbose
    python -m src.main --difficulty hard --mode kr_jp --seed 7
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml

from .data import load_dictionary, load_questions
from .engine import (
    GameConfig,
    KanaStrikeError,
    RankingIneligibleError,
    SessionController,
    Typist,
)


def load_config(config_path: str) -> GameConfig:
    """Load game configuration from a YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return GameConfig(**data)


def build_config(args: argparse.Namespace) -> GameConfig:
    """Load the config file (if any) and apply command line overrides."""
    config = load_config(args.config) if args.config else GameConfig()

    overrides = {}
    for field in ("mode", "difficulty", "seed", "player_name"):
        value = getattr(args, field)
        if value is not None:
            overrides[field] = value
    if args.practice:
        overrides["practice"] = True

    if overrides:
        config = GameConfig(**{**config.model_dump(), **overrides})
    return config


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(
        description="Play a kana typing session with a simulated typist",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example config.yaml:
  mode: kr_jp
  difficulty: normal
  seed: 42
  player_name: maple
  typist:
    keys_per_second: 7.5
    miss_rate: 0.03
        """
    )
    parser.add_argument(
        "config",
        nargs="?",
        help="Path to YAML configuration file (defaults are used without one)"
    )
    parser.add_argument("--mode", choices=["jp_jp", "kr_jp", "kr_kr", "jp_kr"], help="Display/reading mode")
    parser.add_argument("--difficulty", choices=["easy", "normal", "hard"], help="Difficulty preset")
    parser.add_argument("--seed", type=int, help="Random seed for question order")
    parser.add_argument("--player-name", dest="player_name", help="Name on the ranking record")
    parser.add_argument("--practice", action="store_true", help="Practice mode (not ranked)")
    parser.add_argument(
        "--output", "-o",
        help="Path to save results JSON (default: results/session_<timestamp>.json)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print progress to stdout"
    )

    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    try:
        dictionary = load_dictionary(config.dictionary_path)
        pool = load_questions(config.questions_path)
    except KanaStrikeError as e:
        print(f"Error loading data: {e}", file=sys.stderr)
        return 1

    # Determine output path
    if args.output:
        output_path = Path(args.output)
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = Path("results") / f"session_{timestamp}.json"

    controller = SessionController(dictionary, config)
    typist = Typist.from_config(config.typist)

    try:
        controller.start(pool, now=0.0)
    except KanaStrikeError as e:
        print(f"Error starting session: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Mode: {config.mode}  Difficulty: {config.difficulty}")
        print(f"Questions in pool: {len(controller.pool)}")
        print(f"Output: {output_path}")
        print()

    try:
        summary = typist.play(controller, start=0.0, verbose=args.verbose)
    except KeyboardInterrupt:
        print("\nSession interrupted by user")
        summary = controller.abort(now=typist.last_time)

    controller.save_result(output_path)

    if args.verbose:
        print()
        print(f"Results saved to: {output_path}")

    # Print summary
    print()
    print("=== Session Summary ===")
    print(f"End reason: {summary.reason}")
    print(f"Time: {summary.elapsed_time:.2f}s")
    print(f"Damage: {summary.total_damage} / {controller.state.max_hp}")
    print(f"Correct: {summary.correct_count}  Miss: {summary.miss_count}  Max combo: {summary.max_combo}")
    print(f"Keys/sec: {summary.keys_per_second:.2f}")

    try:
        record = controller.export_record()
        print(f"Ranking record: {json.dumps(record.model_dump(), ensure_ascii=False)}")
    except RankingIneligibleError as e:
        print(f"Not ranked: {e}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
