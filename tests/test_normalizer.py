"""
Tests for the normalizer cascade: exact/contains, fuzzy, keyword, fallback.
"""

import pytest

from talentmatch.core.knowledge_base import KnowledgeBase
from talentmatch.core.normalizer import (
    levenshtein,
    normalize,
    normalize_profile,
    similarity,
    split_subjects,
    title_case,
)


class TestEditDistance:
    """Tests for levenshtein() and similarity()."""

    def test_levenshtein_classic(self):
        assert levenshtein("kitten", "sitting") == 3
        assert levenshtein("", "abc") == 3
        assert levenshtein("same", "same") == 0

    def test_similarity_of_two_empty_strings_is_one(self):
        assert similarity("", "") == 1.0

    @pytest.mark.parametrize("a,b", [
        ("comp sci", "Computer Science"),
        ("dubai", "Dubay"),
        ("", "x"),
        ("Heriot Watt", "heriot-watt university dubai"),
    ])
    def test_similarity_is_symmetric(self, a, b):
        assert similarity(a, b) == similarity(b, a)

    def test_similarity_is_case_insensitive(self):
        assert similarity("DUBAI", "dubai") == 1.0


class TestRegisteredValues:
    """Registered abbreviations and variants resolve with high confidence."""

    def test_university_abbreviation(self, kb):
        nc = normalize("university", "AUD", kb)
        assert nc.standard == "American University of Dubai"
        assert nc.category == "private_american"
        assert nc.confidence == 0.95

    def test_major_variant(self, kb):
        nc = normalize("major", "Comp Sci", kb)
        assert nc.standard == "Computer Science"
        assert nc.category == "technology"
        assert nc.confidence >= 0.95

    def test_canonical_name_matches_itself(self, kb):
        nc = normalize("location", "Abu Dhabi", kb)
        assert (nc.standard, nc.category, nc.confidence) == ("Abu Dhabi", "abu_dhabi", 0.95)

    def test_input_containing_a_variant(self, kb):
        nc = normalize("location", "Dubai, UAE", kb)
        assert nc.standard == "Dubai"
        assert nc.confidence == 0.95

    def test_skill_variant_maps_to_canonical_skill(self, kb):
        nc = normalize("skill", "Python", kb)
        assert nc.standard == "Programming"
        assert nc.category == "technical"

    def test_short_abbreviation_does_not_fire_inside_words(self, kb):
        nc = normalize("major", "Media", kb)
        assert nc.standard != "Mechanical Engineering"

    def test_raw_input_is_preserved(self, kb):
        assert normalize("university", "  aud ", kb).raw == "  aud "

    @pytest.mark.parametrize("field", ["university", "major", "skill", "location"])
    def test_every_registered_variant_resolves_exactly(self, kb, field):
        for entry in kb.entries(field):
            for raw in list(entry.variants) + [entry.canonical]:
                nc = normalize(field, raw, kb)
                assert nc.standard == entry.canonical, raw
                assert nc.confidence >= 0.95, raw

    @pytest.mark.parametrize("raw", ["University", "American University", "Dubai", "Medical University"])
    def test_generic_university_text_is_not_a_specific_institution(self, kb, raw):
        assert normalize("university", raw, kb).confidence < 0.95

    def test_generic_university_text_falls_to_keyword_rules(self, kb):
        nc = normalize("university", "American University", kb)
        assert (nc.standard, nc.category, nc.confidence) == ("American University", "private_american", 0.6)
        assert normalize("university", "University", kb).category == "unknown"

    def test_partial_major_text_still_matches_a_longer_variant(self, kb):
        nc = normalize("major", "Software", kb)
        assert (nc.standard, nc.confidence) == ("Computer Science", 0.95)


class TestFuzzyKeywordFallback:
    """Lower tiers of the cascade."""

    def test_fuzzy_match_uses_similarity_as_confidence(self, kb):
        nc = normalize("major", "Computer Sci", kb)
        assert nc.standard == "Computer Science"
        assert nc.confidence == pytest.approx(0.75)

    def test_keyword_rule(self, kb):
        nc = normalize("major", "Aerospace Engineering", kb)
        assert nc.category == "engineering"
        assert nc.confidence == 0.6
        assert nc.standard == "Aerospace Engineering"

    def test_location_keyword(self, kb):
        nc = normalize("location", "Remote (online)", kb)
        assert nc.category == "remote"
        assert nc.confidence == 0.6

    def test_skill_keyword(self, kb):
        nc = normalize("skill", "software testing", kb)
        assert (nc.category, nc.confidence) == ("technical", 0.6)

    def test_fallback_per_field(self, kb):
        assert normalize("university", "Harvard", kb).category == "unknown"
        assert normalize("major", "Underwater Basket Weaving", kb).category == "other"
        assert normalize("location", "Reykjavik", kb).category == "international"
        nc = normalize("university", "Harvard", kb)
        assert nc.confidence == 0.3
        assert nc.standard == "Harvard"

    def test_standard_is_title_cased_when_unmatched(self, kb):
        assert normalize("major", "underwater   basket weaving", kb).standard == "Underwater Basket Weaving"


class TestTotality:
    """normalize() never raises and always stays in bounds."""

    @pytest.mark.parametrize("field", ["university", "major", "skill", "location", "nonsense"])
    @pytest.mark.parametrize("raw", [None, "", "   ", "\x00", "!!!", "ÄÖÜ ß", "a" * 500, "c++", "(", "ad"])
    def test_any_input(self, kb, field, raw):
        nc = normalize(field, raw, kb)
        assert 0.0 <= nc.confidence <= 1.0
        assert nc.standard
        assert nc.category

    def test_empty_is_unknown(self, kb):
        nc = normalize("major", "", kb)
        assert (nc.standard, nc.category, nc.confidence) == ("Unknown", "unknown", 0.0)
        assert normalize("major", None, kb).confidence == 0.0


class TestProfileNormalization:
    """normalize_profile() and helpers."""

    def test_every_field_is_normalized(self, kb, make_profile):
        p = make_profile(university="AUS", major="BBA", location="Sharjah",
                         skills=["SQL", "Figma"], subjects="Computer Science, Mathematics")
        cats = normalize_profile(p, kb)
        assert cats.university.standard == "American University of Sharjah"
        assert cats.major.standard == "Business Administration"
        assert [s.standard for s in cats.skills] == ["Data Analysis", "Design"]
        assert cats.subjects[0].category == "technology"
        assert cats.location.category == "sharjah"
        assert len(cats.all_fields()) == 7

    def test_split_subjects(self):
        assert split_subjects("Math, Physics & Chemistry") == ["Math", "Physics", "Chemistry"]
        assert split_subjects("") == []
        assert split_subjects(None) == []

    def test_title_case(self):
        assert title_case("  comp   SCI ") == "Comp Sci"

    def test_alternate_registry(self):
        kb = KnowledgeBase.from_dict({
            "majors": [{"variants": ["astro"], "canonical": "Astronomy", "category": "sciences"}],
            "version": "test",
        })
        nc = normalize("major", "astro", kb)
        assert (nc.standard, nc.category) == ("Astronomy", "sciences")
        assert kb.version == "test"
        assert normalize("university", "AUD", kb).category == "unknown"

    def test_default_registry_is_cached(self):
        assert KnowledgeBase.default() is KnowledgeBase.default()
