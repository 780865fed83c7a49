"""
Tests for the rule-based job classifier.

The decision rules are checked in priority order, followed by the batch
helper and summary statistics.
"""

import json

import pytest

from juno.ai_processing import (
    ClassificationResult, KeywordRules, classify, classify_all, extract_experience_years,
    get_analysis_stats, get_default_rules
)
from juno.lead_parser import RawRecord


class TestDecisionRules:
    """First matching rule wins."""

    def test_senior_listing_is_rejected(self, full_profile):
        result = classify("Looking for a Senior Software Engineer, 5+ years required", full_profile)

        assert result.is_entry_level is False
        assert result.reason == "Contains senior/experienced position keywords"
        assert result.email_subject == ""
        assert result.email_body == ""

    def test_entry_level_keywords(self, empty_profile):
        result = classify("Entry level Marketing Assistant, no experience necessary", empty_profile)

        assert result.is_entry_level is True
        assert result.reason == "Contains entry-level keywords and no senior requirements"

    def test_senior_keyword_beats_entry_keyword(self, empty_profile):
        result = classify("Junior or Senior Python developer", empty_profile)

        assert result.is_entry_level is False
        assert result.reason == "Contains senior/experienced position keywords"

    def test_empty_description_defaults_to_entry_level(self, empty_profile):
        result = classify("", empty_profile)

        assert result.is_entry_level is True
        assert result.reason == "No specific experience requirements mentioned - likely entry-level"
        assert result.email_subject == "Application for UI/UX Designer Position"
        assert result.email_body.startswith("Dear Hiring Team,")

    def test_many_years_required(self, empty_profile):
        result = classify("Requires at least 6 years of backend work", empty_profile)

        assert result.is_entry_level is False
        assert result.reason == "Requires 6+ years of experience"

    def test_few_years_required(self, empty_profile):
        result = classify("Candidates must have at least 2 years of experience in Python", empty_profile)

        assert result.is_entry_level is True
        assert result.reason == "Requires 2 years or less - entry-level acceptable"

    def test_years_at_three_hit_the_senior_table_first(self, empty_profile):
        result = classify("You need at least 3 years of Python", empty_profile)

        assert result.is_entry_level is False
        assert result.reason == "Contains senior/experienced position keywords"

    def test_matching_is_case_insensitive(self, empty_profile):
        result = classify("JUNIOR DEVELOPER WANTED", empty_profile)

        assert result.is_entry_level is True
        assert result.reason == "Contains entry-level keywords and no senior requirements"

    def test_numeric_range_only_matches_as_substring(self, empty_profile):
        rules = get_default_rules()

        assert extract_experience_years("0-2 years of experience", rules).max_years == 0
        assert classify("0-2 years of experience", empty_profile).reason == (
            "Contains entry-level keywords and no senior requirements"
        )

    def test_classification_is_deterministic(self, full_profile):
        description = "Junior Data Analyst with Excel skills"
        assert classify(description, full_profile) == classify(description, full_profile)

    def test_missing_profile_is_treated_as_empty(self):
        result = classify("Junior Python developer")
        assert result.is_entry_level is True
        assert result.email_body.endswith("Best regards,")


class TestExperienceExtraction:
    """The experience pattern only recognizes 'at least N years'."""

    def test_max_and_min_over_all_matches(self):
        rules = get_default_rules()
        experience = extract_experience_years("At least 1 year of SQL and at least 7 years overall", rules)

        assert experience.max_years == 7
        assert experience.min_years == 1

    def test_no_matches(self):
        experience = extract_experience_years("Plenty of experience preferred", get_default_rules())

        assert experience.max_years == 0
        assert experience.min_years == 0


class TestKeywordRules:
    """Keyword tables are data loaded from JSON."""

    def test_default_tables_loaded(self):
        rules = get_default_rules()

        assert "entry level" in rules.entry_level_keywords
        assert "10+ year" in rules.senior_keywords
        assert len(rules.experience_patterns) == 1

    def test_custom_rules_file(self, tmp_path, empty_profile):
        keywords = {
            "entry_level_keywords": ["apprentice"],
            "senior_keywords": ["veteran"],
            "experience_patterns": [r"(\d+)\s+years? minimum"],
        }
        path = tmp_path / "keywords.json"
        path.write_text(json.dumps(keywords), encoding="utf-8")
        rules = KeywordRules.from_file(path)

        assert classify("Apprentice carpenter", empty_profile, rules).is_entry_level is True
        assert classify("Veteran carpenter", empty_profile, rules).is_entry_level is False
        assert classify("4 years minimum", empty_profile, rules).reason == "Requires 4+ years of experience"

    def test_invalid_pattern_is_skipped(self):
        rules = KeywordRules.from_dict({"experience_patterns": ["(unclosed", r"(\d+) yrs"]})
        assert len(rules.experience_patterns) == 1

    def test_keywords_are_lowercased(self):
        rules = KeywordRules.from_dict({"entry_level_keywords": ["Trainee"]})
        assert rules.entry_level_keywords == ["trainee"]


class TestClassifyAll:
    """Batch helper is a one-to-one, order-preserving mapping."""

    def test_order_and_length_preserved(self, empty_profile):
        records = [
            RawRecord(email="a@x.com", phone="", description="Senior architect"),
            RawRecord(email="b@x.com", phone="", description="Junior designer"),
            RawRecord(email="c@x.com", phone="", description=""),
        ]
        results = classify_all(records, empty_profile)

        assert len(results) == 3
        assert [r.is_entry_level for r in results] == [False, True, True]
        assert results[0] == classify("Senior architect", empty_profile)

    def test_accepts_mappings(self, empty_profile):
        results = classify_all([{"description": "Lead engineer"}, {}], empty_profile)
        assert [r.is_entry_level for r in results] == [False, True]

    def test_empty_input(self, empty_profile):
        assert classify_all([], empty_profile) == []


class TestAnalysisStats:
    """Summary statistic over a batch of results."""

    def _result(self, entry):
        return ClassificationResult(is_entry_level=entry, email_subject="", reason="", email_body="")

    def test_counts_and_percentage(self):
        stats = get_analysis_stats([self._result(True), self._result(False), self._result(True)])

        assert stats.total == 3
        assert stats.entry_level == 2
        assert stats.skipped == 1
        assert stats.percentage == "66.7"

    def test_all_entry_level(self):
        stats = get_analysis_stats([self._result(True)])
        assert stats.percentage == "100.0"

    def test_empty_results_raise(self):
        with pytest.raises(ZeroDivisionError):
            get_analysis_stats([])


class TestClassificationResult:
    """Wire format conversion."""

    def test_to_dict_uses_camel_case(self):
        result = ClassificationResult(is_entry_level=True, email_subject="S", reason="R", email_body="B")
        assert result.to_dict() == {
            "isEntryLevel": True, "emailSubject": "S", "emailBody": "B", "reason": "R"
        }

    def test_from_dict_clears_email_for_rejections(self):
        result = ClassificationResult.from_dict({
            "isEntryLevel": False, "emailSubject": "S", "emailBody": "B", "reason": "Too senior"
        })
        assert result.email_subject == ""
        assert result.email_body == ""
        assert result.reason == "Too senior"

    def test_from_dict_requires_boolean_flag(self):
        with pytest.raises(ValueError):
            ClassificationResult.from_dict({"isEntryLevel": "yes"})
