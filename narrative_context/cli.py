"""
Narrative Context - Command Line Interface

    narrative-context optimize PATH --budget N [--focus NAME ...] [--cursor N]
                      [--cursor-unit segment|char] [--tier N]
                      [--estimator heuristic|tiktoken|words] [--json]
    narrative-context estimate PATH [--estimator ...]

PATH is a text file or a directory whose .txt/.md files are read in sorted order
and joined as separate paragraphs.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .compaction import ContextEngine
from .config import load_config
from .errors import NarrativeContextError
from .observability import setup_logging
from .sizing import ESTIMATORS, estimator_name, get_estimator

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".md"}


def read_text_from_path(p: str, joiner: str = "\n\n") -> str:
    """
    Read text from file or directory path.

    Raises:
        FileNotFoundError: If path doesn't exist
    """
    path = Path(p)
    if not path.exists():
        raise FileNotFoundError(f"Path does not exist: {p}")

    if path.is_file():
        return path.read_text(encoding="utf-8", errors="replace")

    parts = []
    for f in sorted(path.rglob("*")):
        if f.is_file() and f.suffix.lower() in TEXT_SUFFIXES:
            text = f.read_text(encoding="utf-8", errors="replace").strip()
            if text:
                parts.append(text)
    return joiner.join(parts)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="narrative-context",
        description="Compact narrative text into a size budget",
    )
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    sub = parser.add_subparsers(dest="cmd", required=True)

    o = sub.add_parser("optimize", help="Compact a file or directory of text into a budget")
    o.add_argument("input_path", type=str)
    o.add_argument("-b", "--budget", type=int, required=True)
    o.add_argument("-f", "--focus", action="append", default=[], help="Focus character (repeatable)")
    o.add_argument("-c", "--cursor", type=int, default=None, help="Writing position (default: end of text)")
    o.add_argument("--cursor-unit", choices=("segment", "char"), default="segment")
    o.add_argument("-t", "--tier", type=int, default=None, help="Force a compression tier level")
    o.add_argument("-e", "--estimator", choices=sorted(ESTIMATORS), default=None)
    o.add_argument("--json", action="store_true", help="Print the full report as JSON")
    o.add_argument("--strict", action="store_true", help="Fail when the result exceeds the budget")

    e = sub.add_parser("estimate", help="Estimate the size of a file or directory of text")
    e.add_argument("input_path", type=str)
    e.add_argument("-e", "--estimator", choices=sorted(ESTIMATORS), default=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
        setup_logging(args.log_level or str(config.log_level), json_format=config.observability.json_logs)

        if args.estimator is None:
            estimator = config.build_estimator()
        elif args.estimator == "tiktoken":
            estimator = get_estimator("tiktoken", encoding_name=config.tiktoken_encoding)
        else:
            estimator = get_estimator(args.estimator)

        text = read_text_from_path(args.input_path, config.engine.segmenter.joiner)

        if args.cmd == "estimate":
            print(f"{estimator(text)} ({estimator_name(estimator)}, {len(text)} characters)")
            return 0

        engine = ContextEngine(config=config.engine, estimator=estimator)
        result = engine.optimize_text(
            text,
            args.budget,
            focus_characters=args.focus,
            cursor_position=args.cursor,
            cursor_unit=args.cursor_unit,
            force_tier=args.tier,
        )
        if args.strict:
            result.raise_for_budget()
    except (NarrativeContextError, FileNotFoundError, KeyError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
    else:
        print(result.content)
        print(json.dumps(result.summary()), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
