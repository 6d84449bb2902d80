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

from inference.pipeline import run_vision


def _overrides(args: argparse.Namespace) -> dict:
    overrides = {}
    if args.all:
        overrides["max_categories"] = None
    if args.max_categories is not None:
        overrides["max_categories"] = args.max_categories
    if args.output:
        overrides["output_path"] = Path(args.output).resolve()
    return overrides


def main() -> None:
    parser = argparse.ArgumentParser(description="Animal identification on image folders through Ollama")
    parser.add_argument("--max-categories", type=int, default=None)
    parser.add_argument("--all", action="store_true", help="Process every category folder")
    parser.add_argument("--output", default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    outcome = run_vision(**_overrides(args))
    if outcome.output_path:
        print(f"Results saved: {outcome.output_path}")
    print(f"{outcome.status.value}: {outcome.message}")
    sys.exit(outcome.exit_code)


if __name__ == "__main__":
    main()
