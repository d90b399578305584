# talentmatch/cli.py
"""
talentmatch categorize --pool candidates.json
talentmatch activity   --pool candidates.json
talentmatch search     --pool candidates.json --query "CS students in Dubai" [--limit 10] [--json]
talentmatch reprocess  --pool candidates.json [--delay 0] [--resume-after ID]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from dotenv import find_dotenv, load_dotenv

from talentmatch.agents.enhancement_agent import build_enhancer_from_env
from talentmatch.core.errors import InvalidCandidateRecord, TalentMatchError
from talentmatch.core.ranking import MatchResult
from talentmatch.pipeline.engine import TalentEngine

log = logging.getLogger("talentmatch.cli")


def _boot(verbose: bool) -> None:
    load_dotenv(find_dotenv(usecwd=True), override=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    warnings.filterwarnings("ignore")
    for n in ("httpx", "httpcore", "openai", "urllib3"):
        logging.getLogger(n).setLevel(logging.WARNING)


def load_pool(path: str) -> List[Any]:
    """A JSON list of candidate records, or {"candidates": [...]}."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("candidates")
    if not isinstance(data, list):
        raise SystemExit(f"{path}: expected a JSON list of candidate records")
    return data


def results_frame(results: List[MatchResult]) -> pd.DataFrame:
    return pd.DataFrame([{
        "Candidate": r.candidate_id,
        "Score (0-100)": r.score,
        "Activity Bonus": round(r.activity_bonus, 2),
        "Matched": ", ".join(r.matched_keywords) or "-",
        "Reasons": "; ".join(r.reasons) or "-",
    } for r in results], columns=["Candidate", "Score (0-100)", "Activity Bonus", "Matched", "Reasons"])


def _dump(obj: Any) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2))


def _per_record(pool: List[Any], fn) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for i, rec in enumerate(pool):
        try:
            out.append(fn(rec))
        except InvalidCandidateRecord as e:
            log.warning("skipping record #%d: %s", i, e.message)
    return out


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="talentmatch", description="Candidate normalization and matching engine")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def _cmd(name: str, help_: str) -> argparse.ArgumentParser:
        p = sub.add_parser(name, help=help_)
        p.add_argument("--pool", required=True, help="Path to a JSON file of candidate records")
        return p

    c = _cmd("categorize", "Normalize and tag every candidate")
    c.add_argument("--no-ai", action="store_true", help="Skip the AI enhancement step")

    _cmd("activity", "Activity and completeness metrics per candidate")

    s = _cmd("search", "Rank the pool against a recruiter query")
    s.add_argument("--query", required=True, help="Free-text recruiter query")
    s.add_argument("--limit", type=int, default=None)
    s.add_argument("--workers", type=int, default=1)
    s.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    r = _cmd("reprocess", "Bulk re-normalize the whole pool")
    r.add_argument("--delay", type=float, default=None, help="Seconds between candidates")
    r.add_argument("--resume-after", default=None, help="Skip records up to and including this id")
    r.add_argument("--no-ai", action="store_true", help="Skip the AI enhancement step")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _boot(args.verbose)

    use_ai = args.command in ("categorize", "reprocess") and not getattr(args, "no_ai", False)
    engine = TalentEngine(enhancer=build_enhancer_from_env() if use_ai else None)
    pool = load_pool(args.pool)

    try:
        if args.command == "categorize":
            _dump(_per_record(pool, lambda rec: {
                "id": str(rec.get("id", "")) if isinstance(rec, dict) else "",
                **engine.normalize_and_categorize(rec).to_dict(),
            }))
        elif args.command == "activity":
            _dump(_per_record(pool, lambda rec: {
                "id": str(rec.get("id", "")) if isinstance(rec, dict) else "",
                **engine.compute_activity_metrics(rec).to_dict(),
            }))
        elif args.command == "search":
            results = engine.search(args.query, pool, limit=args.limit, workers=args.workers)
            if args.json:
                _dump([r.to_dict() for r in results])
            else:
                df = results_frame(results)
                print(df.to_string(index=False) if not df.empty else "No matching candidates.")
        elif args.command == "reprocess":
            report = engine.bulk_reprocess(pool, delay=args.delay, resume_after=args.resume_after)
            _dump(report.to_dict())
    except TalentMatchError as e:
        log.error("%s: %s", e.error_code, e.message)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
