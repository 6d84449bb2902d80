from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
load_dotenv(ROOT / ".env")

from inference.pipeline import run_sentiment


def _overrides(args: argparse.Namespace) -> dict:
    overrides = {}
    if args.all:
        overrides.update(max_games=None, max_reviews_per_game=None)
    if args.max_games is not None:
        overrides["max_games"] = args.max_games
    if args.max_reviews is not None:
        overrides["max_reviews_per_game"] = args.max_reviews
    if args.output:
        overrides["output_path"] = Path(args.output).resolve()
    return overrides


def main() -> None:
    parser = argparse.ArgumentParser(description="Steam review sentiment analysis through Ollama")
    parser.add_argument("--max-games", type=int, default=None)
    parser.add_argument("--max-reviews", type=int, default=None, help="Reviews per game")
    parser.add_argument("--all", action="store_true", help="Process every game and review")
    parser.add_argument("--output", default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    outcome = run_sentiment(**_overrides(args))
    if outcome.output_path:
        print(f"Results saved: {outcome.output_path}")
    print(f"{outcome.status.value}: {outcome.message}")
    sys.exit(outcome.exit_code)


if __name__ == "__main__":
    main()
