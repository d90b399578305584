# talentmatch/pipeline/bulk.py
"""
Whole-pool maintenance pass: normalize, (optionally) enhance, tag and score
every candidate sequentially. One bad record never stops the run.

Checkpointing is the caller's: `on_result(candidate_id, outcome)` fires only
after a candidate's full computation succeeded; if it raises, that candidate
counts as failed and the run moves on. `resume_after=<id>` skips
everything up to and including that id on the next run.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from talentmatch.agents.enhancement_agent import Enhancer
from talentmatch.core.activity import ActivityMetrics, score_activity
from talentmatch.core.errors import InvalidCandidatePool, InvalidCandidateRecord
from talentmatch.core.knowledge_base import KnowledgeBase
from talentmatch.core.models import CandidateProfile, Categorization, to_datetime
from talentmatch.core.normalizer import normalize_profile
from talentmatch.core.tags import SemanticTag, generate_tags, merge_tag_catalogue

log = logging.getLogger("talentmatch.pipeline.bulk")

BULK_DELAY_SECONDS = float(os.getenv("BULK_DELAY_SECONDS", "0.1"))
IMPROVED_MIN_CONFIDENCE = 0.6
PROGRESS_EVERY = 50


@dataclass(frozen=True)
class CandidateOutcome:
    candidate_id: str
    categories: Categorization
    tags: Tuple[SemanticTag, ...]
    activity: ActivityMetrics
    improved: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "categories": self.categories.to_dict(),
            "tags": [t.to_dict() for t in self.tags],
            "activity": self.activity.to_dict(),
            "improved": self.improved,
        }


@dataclass(frozen=True)
class BulkReport:
    processed: int = 0
    improved: int = 0
    failed: int = 0
    flagged_for_review: Tuple[str, ...] = ()
    new_tag_count: int = 0
    tags: Tuple[SemanticTag, ...] = ()
    last_processed_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "improved": self.improved,
            "failed": self.failed,
            "flagged_for_review": list(self.flagged_for_review),
            "new_tag_count": self.new_tag_count,
            "tags": [t.to_dict() for t in self.tags],
            "last_processed_id": self.last_processed_id,
        }


def is_improved(categories: Categorization) -> bool:
    return all(nc.confidence >= IMPROVED_MIN_CONFIDENCE for nc in categories.all_fields())


def process_candidate(
    profile: CandidateProfile,
    kb: KnowledgeBase,
    enhancer: Optional[Enhancer] = None,
    now: Optional[datetime] = None,
) -> CandidateOutcome:
    cats = normalize_profile(profile, kb)
    if enhancer is not None:
        cats = enhancer.enhance(profile, cats)
    return CandidateOutcome(
        candidate_id=profile.id,
        categories=cats,
        tags=tuple(generate_tags(profile, cats)),
        activity=score_activity(profile, now=now),
        improved=is_improved(cats),
    )


def _record_id(record: Any, index: int) -> str:
    if isinstance(record, CandidateProfile):
        return record.id
    if isinstance(record, dict):
        for k in ("id", "candidate_id", "userId"):
            v = record.get(k)
            if v is not None and str(v).strip():
                return str(v).strip()
    return f"record-{index}"


def reprocess_all(
    pool: Any,
    kb: KnowledgeBase,
    enhancer: Optional[Enhancer] = None,
    delay: Optional[float] = None,
    on_result: Optional[Callable[[str, CandidateOutcome], None]] = None,
    resume_after: Optional[str] = None,
    now: Optional[datetime] = None,
) -> BulkReport:
    if pool is None or isinstance(pool, (str, bytes, dict)) or not isinstance(pool, Iterable):
        raise InvalidCandidatePool("candidate pool must be an iterable of records",
                                   details={"type": type(pool).__name__})

    pause = BULK_DELAY_SECONDS if delay is None else max(0.0, float(delay))
    now_dt = to_datetime(now) or datetime.now(timezone.utc)

    records = list(pool)
    start = 0
    if resume_after is not None:
        ids = [_record_id(r, i) for i, r in enumerate(records)]
        if resume_after in ids:
            start = ids.index(resume_after) + 1
        else:
            log.warning("resume_after id not in pool; processing everything")

    processed = improved = failed = 0
    flagged: List[str] = []
    tag_lists: List[Tuple[SemanticTag, ...]] = []
    last_id: Optional[str] = None

    def _flag(cid: str) -> None:
        if cid not in flagged:
            flagged.append(cid)

    todo = records[start:]
    log.info("bulk reprocess start: pool=%d skipped=%d enhancer=%s", len(records), start, enhancer is not None)
    for offset, rec in enumerate(todo):
        idx = start + offset
        cid = _record_id(rec, idx)
        try:
            profile = CandidateProfile.coerce(rec)
            outcome = process_candidate(profile, kb, enhancer=enhancer, now=now_dt)
            if on_result is not None:
                on_result(outcome.candidate_id, outcome)
        except InvalidCandidateRecord as e:
            failed += 1
            _flag(cid)
            log.warning("bulk: invalid record %s: %s", cid, e.message)
        except Exception as e:
            failed += 1
            _flag(cid)
            log.warning("bulk: candidate %s failed: %s", cid, type(e).__name__)
        else:
            processed += 1
            last_id = outcome.candidate_id
            tag_lists.append(outcome.tags)
            if outcome.improved:
                improved += 1
            else:
                _flag(outcome.candidate_id)

        done = offset + 1
        if done % PROGRESS_EVERY == 0:
            log.info("bulk progress: %d/%d (failed=%d)", done, len(todo), failed)
        if pause and done < len(todo):
            time.sleep(pause)

    catalogue = merge_tag_catalogue(tag_lists)
    log.info("bulk reprocess done: processed=%d improved=%d failed=%d flagged=%d tags=%d",
             processed, improved, failed, len(flagged), len(catalogue))
    return BulkReport(
        processed=processed,
        improved=improved,
        failed=failed,
        flagged_for_review=tuple(flagged),
        new_tag_count=len(catalogue),
        tags=tuple(catalogue),
        last_processed_id=last_id,
    )
