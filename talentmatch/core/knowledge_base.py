# talentmatch/core/knowledge_base.py
"""
Static, versioned lookup tables for universities, majors, skills and locations.

A KnowledgeBase is built once (KnowledgeBase.default() is cached) and handed
to every normalizer/matcher call. Nothing here is mutated after construction;
tests build alternate registries with KnowledgeBase.from_dict().
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

KB_VERSION = "2025.10"

FIELD_UNIVERSITY = "university"
FIELD_MAJOR = "major"
FIELD_SKILL = "skill"
FIELD_LOCATION = "location"
FIELD_TYPES = (FIELD_UNIVERSITY, FIELD_MAJOR, FIELD_SKILL, FIELD_LOCATION)


# ---------- registry entries ----------

@dataclass(frozen=True)
class UniversityMapping:
    abbreviations: Tuple[str, ...]
    canonical: str
    category: str
    region: str

    @property
    def variants(self) -> Tuple[str, ...]:
        return self.abbreviations


@dataclass(frozen=True)
class MajorMapping:
    variants: Tuple[str, ...]
    canonical: str
    category: str
    industries: Tuple[str, ...] = ()
    skill_categories: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SkillMapping:
    variants: Tuple[str, ...]
    canonical: str
    category: str
    industries: Tuple[str, ...] = ()
    level: str = "intermediate"


@dataclass(frozen=True)
class LocationMapping:
    variants: Tuple[str, ...]
    canonical: str
    region: str
    country: str = ""

    @property
    def category(self) -> str:
        return self.region


Entry = Union[UniversityMapping, MajorMapping, SkillMapping, LocationMapping]


# ---------- shipped data ----------

_UNIVERSITIES: Tuple[UniversityMapping, ...] = (
    UniversityMapping(("aud", "american university dubai", "american university of dubai", "au dubai"),
                      "American University of Dubai", "private_american", "dubai"),
    UniversityMapping(("aus", "american university sharjah", "american university of sharjah", "au sharjah"),
                      "American University of Sharjah", "private_american", "sharjah"),
    UniversityMapping(("gmu", "gulf medical", "gulf medical university"),
                      "Gulf Medical University", "medical_specialized", "ajman"),
    UniversityMapping(("uaeu", "uae university", "united arab emirates university", "emirates university"),
                      "United Arab Emirates University", "public_national", "al_ain"),
    UniversityMapping(("zu", "zayed", "zayed university", "zayed uni"),
                      "Zayed University", "public_national", "multiple"),
    UniversityMapping(("ku", "khalifa", "khalifa university", "khalifa uni"),
                      "Khalifa University", "public_national", "abu_dhabi"),
    UniversityMapping(("uos", "university of sharjah", "sharjah university", "u of sharjah"),
                      "University of Sharjah", "public_national", "sharjah"),
    UniversityMapping(("cud", "canadian university", "canadian university dubai", "canadian dubai"),
                      "Canadian University Dubai", "international_branch", "dubai"),
    UniversityMapping(("ajman uni", "ajman university", "au ajman"),
                      "Ajman University", "private_national", "ajman"),
    UniversityMapping(("bits", "birla", "bits pilani", "bits pilani dubai"),
                      "BITS Pilani Dubai", "international_branch", "dubai"),
    UniversityMapping(("hw", "hwu", "heriot watt", "heriot-watt", "hw dubai"),
                      "Heriot-Watt University Dubai", "international_branch", "dubai"),
)

_MAJORS: Tuple[MajorMapping, ...] = (
    MajorMapping(("computer science", "cs", "comp sci", "compsci", "computing", "computer engineering",
                  "software engineering", "software development"),
                 "Computer Science", "technology",
                 ("software", "tech", "ai", "cybersecurity"), ("programming", "analytical", "problem_solving")),
    MajorMapping(("business administration", "bba", "mba", "business admin", "business studies", "management"),
                 "Business Administration", "business",
                 ("consulting", "management", "entrepreneurship", "finance"), ("leadership", "communication", "analytical")),
    MajorMapping(("marketing", "marketing communications", "digital marketing", "advertising"),
                 "Marketing", "business",
                 ("advertising", "digital", "ecommerce", "media"), ("creative", "communication", "analytical")),
    MajorMapping(("mechanical engineering", "mech eng", "mechanical eng", "mechanical", "me"),
                 "Mechanical Engineering", "engineering",
                 ("automotive", "manufacturing", "oil_gas", "construction"), ("technical", "problem_solving", "analytical")),
    MajorMapping(("electrical engineering", "electrical eng", "ee", "electrical", "electronics"),
                 "Electrical Engineering", "engineering",
                 ("utilities", "tech", "telecommunications", "automotive"), ("technical", "analytical", "problem_solving")),
    MajorMapping(("civil engineering", "civil eng", "civil", "construction engineering"),
                 "Civil Engineering", "engineering",
                 ("construction", "infrastructure", "real_estate"), ("technical", "analytical", "problem_solving")),
    MajorMapping(("psychology", "psych", "behavioral science", "cognitive science"),
                 "Psychology", "social_sciences",
                 ("healthcare", "education", "hr", "research"), ("analytical", "communication", "empathy")),
    MajorMapping(("graphic design", "visual design", "design", "ui design", "ux design", "ui/ux"),
                 "Design", "creative",
                 ("advertising", "tech", "media", "gaming"), ("creative", "technical", "visual")),
    MajorMapping(("finance", "financial management", "banking", "accounting", "accountancy"),
                 "Finance", "business",
                 ("banking", "investment", "insurance", "consulting"), ("analytical", "mathematical", "detail_oriented")),
    MajorMapping(("medicine", "medical", "mbbs", "md", "medical science"),
                 "Medicine", "healthcare",
                 ("healthcare", "pharmaceuticals", "research", "public_health"), ("analytical", "empathy", "detail_oriented")),
    MajorMapping(("international business", "ib", "global business", "international relations"),
                 "International Business", "business",
                 ("consulting", "trade", "diplomacy", "multinational"), ("communication", "cultural_awareness", "analytical")),
    MajorMapping(("communications", "comm", "media studies", "mass communication", "journalism"),
                 "Communications", "liberal_arts",
                 ("media", "journalism", "public_relations"), ("communication", "creative")),
)

_SKILLS: Tuple[SkillMapping, ...] = (
    SkillMapping(("programming", "coding", "python", "javascript", "typescript", "java", "c++", "react", "node"),
                 "Programming", "technical", ("software", "tech"), "intermediate"),
    SkillMapping(("data analysis", "data analytics", "sql", "excel", "tableau", "power bi", "statistics"),
                 "Data Analysis", "technical", ("tech", "finance", "consulting"), "intermediate"),
    SkillMapping(("design", "photoshop", "figma", "illustrator", "creative", "ui design", "ux design"),
                 "Design", "creative", ("media", "advertising", "tech"), "intermediate"),
    SkillMapping(("communication", "presentation", "public speaking", "writing", "copywriting"),
                 "Communication", "soft_skills", ("media", "consulting"), "intermediate"),
    SkillMapping(("marketing", "social media", "seo", "content marketing", "digital marketing"),
                 "Marketing", "business", ("advertising", "digital", "ecommerce"), "intermediate"),
    SkillMapping(("leadership", "management", "team lead", "project management"),
                 "Leadership", "soft_skills", ("consulting", "management"), "advanced"),
)

_LOCATIONS: Tuple[LocationMapping, ...] = (
    LocationMapping(("dubai", "dxb"), "Dubai", "dubai", "uae"),
    LocationMapping(("sharjah", "shj"), "Sharjah", "sharjah", "uae"),
    LocationMapping(("abu dhabi", "abudhabi", "ad"), "Abu Dhabi", "abu_dhabi", "uae"),
    LocationMapping(("ajman",), "Ajman", "ajman", "uae"),
    LocationMapping(("ras al khaimah", "rak"), "Ras Al Khaimah", "rak", "uae"),
    LocationMapping(("fujairah",), "Fujairah", "fujairah", "uae"),
    LocationMapping(("al ain",), "Al Ain", "al_ain", "uae"),
    LocationMapping(("uae", "emirates", "united arab emirates"), "UAE", "uae", "uae"),
)

# ordered (regex, category) fallbacks, first hit wins
_KEYWORD_RULES: Tuple[Tuple[str, Tuple[Tuple[str, str], ...]], ...] = (
    (FIELD_UNIVERSITY, (
        (r"\bmedical\b", "medical_specialized"),
        (r"\bamerican\b", "private_american"),
        (r"\bbritish\b", "international_branch"),
        (r"\b(high school|secondary)\b", "high_school"),
    )),
    (FIELD_MAJOR, (
        (r"engineer|\btechnical\b", "engineering"),
        (r"\b(business|management|admin)", "business"),
        (r"\b(design|art|arts|creative)\b", "creative"),
        (r"\b(science|sciences|research)\b", "sciences"),
    )),
    (FIELD_SKILL, (
        (r"\b(software|developer|development|data)\b", "technical"),
        (r"\b(team|people|teamwork)\b", "soft_skills"),
    )),
    (FIELD_LOCATION, (
        (r"\b(remote|online)\b", "remote"),
    )),
)

_FALLBACK_CATEGORIES: Tuple[Tuple[str, str], ...] = (
    (FIELD_UNIVERSITY, "unknown"),
    (FIELD_MAJOR, "other"),
    (FIELD_SKILL, "general"),
    (FIELD_LOCATION, "international"),
)


# ---------- the registry object ----------

@dataclass(frozen=True)
class KnowledgeBase:
    universities: Tuple[UniversityMapping, ...]
    majors: Tuple[MajorMapping, ...]
    skills: Tuple[SkillMapping, ...]
    locations: Tuple[LocationMapping, ...]
    keyword_rules: Tuple[Tuple[str, Tuple[Tuple[str, str], ...]], ...] = _KEYWORD_RULES
    fallback_categories: Tuple[Tuple[str, str], ...] = _FALLBACK_CATEGORIES
    version: str = KB_VERSION

    @staticmethod
    @lru_cache(maxsize=1)
    def default() -> "KnowledgeBase":
        return KnowledgeBase(_UNIVERSITIES, _MAJORS, _SKILLS, _LOCATIONS)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KnowledgeBase":
        """
        Build a registry from plain data, e.g.
          {"universities": [{"abbreviations": [...], "canonical": ..., "category": ..., "region": ...}],
           "majors": [...], "skills": [...], "locations": [...], "version": "test"}
        Missing sections are empty; keyword rules default to the shipped ones.
        """
        def _tup(v: Optional[Iterable[str]]) -> Tuple[str, ...]:
            return tuple(str(x) for x in (v or ()))

        unis = tuple(
            UniversityMapping(_tup(u.get("abbreviations")), u["canonical"], u.get("category", "unknown"), u.get("region", ""))
            for u in data.get("universities") or []
        )
        majors = tuple(
            MajorMapping(_tup(m.get("variants")), m["canonical"], m.get("category", "other"),
                         _tup(m.get("industries")), _tup(m.get("skill_categories")))
            for m in data.get("majors") or []
        )
        skills = tuple(
            SkillMapping(_tup(s.get("variants")), s["canonical"], s.get("category", "general"),
                         _tup(s.get("industries")), s.get("level", "intermediate"))
            for s in data.get("skills") or []
        )
        locs = tuple(
            LocationMapping(_tup(loc.get("variants")), loc["canonical"], loc.get("region", ""), loc.get("country", ""))
            for loc in data.get("locations") or []
        )
        return cls(unis, majors, skills, locs, version=str(data.get("version", KB_VERSION)))

    def entries(self, field_type: str) -> Tuple[Entry, ...]:
        return {
            FIELD_UNIVERSITY: self.universities,
            FIELD_MAJOR: self.majors,
            FIELD_SKILL: self.skills,
            FIELD_LOCATION: self.locations,
        }.get(field_type, ())

    def rules_for(self, field_type: str) -> Tuple[Tuple[str, str], ...]:
        for name, rules in self.keyword_rules:
            if name == field_type:
                return rules
        return ()

    def fallback_category(self, field_type: str) -> str:
        for name, category in self.fallback_categories:
            if name == field_type:
                return category
        return "unknown"

    def location_country(self, region: str) -> str:
        for loc in self.locations:
            if loc.region == region:
                return loc.country
        return ""
