# talentmatch/pipeline/engine.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from talentmatch.agents.enhancement_agent import Enhancer
from talentmatch.core.activity import ActivityMetrics, score_activity
from talentmatch.core.errors import InvalidCandidatePool
from talentmatch.core.knowledge_base import KnowledgeBase
from talentmatch.core.models import CandidateProfile, Categorization
from talentmatch.core.normalizer import normalize_profile
from talentmatch.core.parsing import SearchCriteria, parse_query
from talentmatch.core.ranking import MatchResult, rank
from talentmatch.core.tags import SemanticTag, generate_tags
from talentmatch.pipeline.bulk import BulkReport, reprocess_all

log = logging.getLogger("talentmatch.pipeline.engine")

# suggestion thresholds
LOW_CONFIDENCE = 0.7
MIN_SKILLS = 3
MIN_BIO_CHARS = 50


@dataclass(frozen=True)
class ProfileAnalysis:
    categories: Categorization
    semantic_tags: Tuple[SemanticTag, ...]
    suggested_improvements: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": self.categories.to_dict(),
            "semantic_tags": [t.to_dict() for t in self.semantic_tags],
            "suggested_improvements": list(self.suggested_improvements),
        }


def suggest_improvements(profile: CandidateProfile, categories: Categorization) -> List[str]:
    out: List[str] = []
    if categories.university.confidence < LOW_CONFIDENCE:
        out.append("Consider verifying university name for better matching")
    if categories.major.confidence < LOW_CONFIDENCE:
        out.append("Major could be more specific or standardized")
    if len(profile.skills) < MIN_SKILLS:
        out.append("Add more skills to improve job matching")
    if len(profile.bio or "") < MIN_BIO_CHARS:
        out.append("Expand bio to better showcase personality and goals")
    if not profile.interests:
        out.append("Add interests to improve culture fit matching")
    return out


class TalentEngine:
    """
    Public entry point: normalize/categorize one profile, score activity,
    search a pool with a recruiter query, and reprocess a whole pool.

    The knowledge base is fixed per engine; the enhancer is optional and the
    clock is injectable (a zero-arg callable returning an aware datetime).
    """
    def __init__(
        self,
        knowledge_base: Optional[KnowledgeBase] = None,
        enhancer: Optional[Enhancer] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.kb = knowledge_base or KnowledgeBase.default()
        self.enhancer = enhancer
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # -- single profile ---------------------------------------------------

    def normalize_and_categorize(self, profile: Any) -> ProfileAnalysis:
        p = CandidateProfile.coerce(profile)
        cats = normalize_profile(p, self.kb)
        if self.enhancer is not None:
            cats = self.enhancer.enhance(p, cats)
        return ProfileAnalysis(
            categories=cats,
            semantic_tags=tuple(generate_tags(p, cats)),
            suggested_improvements=tuple(suggest_improvements(p, cats)),
        )

    def compute_activity_metrics(self, profile: Any, history: Optional[Iterable[Any]] = None) -> ActivityMetrics:
        return score_activity(CandidateProfile.coerce(profile), now=self.clock(), history=history)

    # -- pool ---------------------------------------------------------------

    def parse(self, query_text: Optional[str]) -> SearchCriteria:
        return parse_query(query_text, self.kb)

    def search(
        self,
        query_text: Optional[str],
        candidate_pool: Any,
        limit: Optional[int] = None,
        workers: int = 1,
    ) -> List[MatchResult]:
        if candidate_pool is None:
            raise InvalidCandidatePool("candidate pool is required")
        criteria = self.parse(query_text)
        log.info(
            "search: fields=%d locations=%d skills=%d uni_types=%d threshold=%s",
            len(criteria.fields), len(criteria.locations), len(criteria.skills),
            len(criteria.university_types), criteria.activity_threshold,
        )
        return rank(candidate_pool, criteria, self.kb, now=self.clock(), workers=workers, limit=limit)

    def bulk_reprocess(self, candidate_pool: Any, **options: Any) -> BulkReport:
        options.setdefault("enhancer", self.enhancer)
        options.setdefault("now", self.clock())
        return reprocess_all(candidate_pool, self.kb, **options)
