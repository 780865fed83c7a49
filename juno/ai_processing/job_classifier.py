"""
Rule-Based Job Classifier

Decides whether a job description describes an entry-level position by
matching it against keyword tables and an experience-years pattern, and
drafts an application email for the listings that qualify. No API calls are
made; the result depends only on the description, the profile and the
keyword tables.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern, Sequence, Tuple, Union

from ..email_composer import compose_email
from ..profile import Profile
from ..utils import get_logger

logger = get_logger(__name__)

REASON_ENTRY_KEYWORDS = "Contains entry-level keywords and no senior requirements"
REASON_SENIOR_KEYWORDS = "Contains senior/experienced position keywords"
REASON_TOO_MANY_YEARS = "Requires {years}+ years of experience"
REASON_FEW_YEARS = "Requires {years} years or less - entry-level acceptable"
REASON_NO_SIGNAL = "No specific experience requirements mentioned - likely entry-level"

MAX_ENTRY_LEVEL_YEARS = 2


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one job description."""
    is_entry_level: bool
    email_subject: str
    reason: str
    email_body: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase field names used on the wire."""
        return {
            "isEntryLevel": self.is_entry_level,
            "emailSubject": self.email_subject,
            "emailBody": self.email_body,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClassificationResult":
        """Build from a camelCase mapping such as a structured LLM response."""
        is_entry_level = data.get("isEntryLevel")
        if not isinstance(is_entry_level, bool):
            raise ValueError(f"isEntryLevel must be a boolean, got {is_entry_level!r}")

        subject = str(data.get("emailSubject") or "")
        body = str(data.get("emailBody") or "")
        if not is_entry_level:
            subject, body = "", ""

        return cls(
            is_entry_level=is_entry_level,
            email_subject=subject,
            reason=str(data.get("reason") or ""),
            email_body=body,
        )


@dataclass(frozen=True)
class AnalysisStats:
    """Summary of a batch of classification results."""
    total: int
    entry_level: int
    skipped: int
    percentage: str


@dataclass(frozen=True)
class ExperienceRequirement:
    """Years of experience found in a description (0 when none)."""
    max_years: int = 0
    min_years: int = 0


@dataclass
class KeywordRules:
    """Keyword tables and experience patterns driving the classifier."""
    entry_level_keywords: List[str] = field(default_factory=list)
    senior_keywords: List[str] = field(default_factory=list)
    experience_patterns: List[Pattern] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KeywordRules":
        patterns = []
        for raw in data.get("experience_patterns", []):
            try:
                patterns.append(re.compile(raw, re.IGNORECASE))
            except re.error as e:
                logger.warning(f"Invalid experience pattern {raw!r}: {e}")

        return cls(
            entry_level_keywords=[k.lower() for k in data.get("entry_level_keywords", [])],
            senior_keywords=[k.lower() for k in data.get("senior_keywords", [])],
            experience_patterns=patterns,
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "KeywordRules":
        """Load keyword tables from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        rules = cls.from_dict(data)
        logger.debug(
            f"Loaded {len(rules.entry_level_keywords)} entry-level and "
            f"{len(rules.senior_keywords)} senior keywords from {path}"
        )
        return rules


_default_rules: Optional[KeywordRules] = None


def get_default_rules() -> KeywordRules:
    """Keyword rules from the configured keywords file, loaded once."""
    global _default_rules
    if _default_rules is None:
        from ..config import get_classifier_config
        _default_rules = KeywordRules.from_file(get_classifier_config().keywords_file)
    return _default_rules


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def extract_experience_years(description: str, rules: KeywordRules) -> ExperienceRequirement:
    """Collect the years named by every experience pattern match."""
    max_years = 0
    min_years = 0

    for pattern in rules.experience_patterns:
        for match in pattern.finditer(description):
            groups = match.groups()
            if groups and groups[0]:
                years = int(groups[0])
                max_years = max(max_years, years)
                min_years = years if min_years == 0 else min(min_years, years)
            # Upper bound of a range pattern
            if len(groups) > 1 and groups[1]:
                max_years = max(max_years, int(groups[1]))

    return ExperienceRequirement(max_years=max_years, min_years=min_years)


def decide(description: str, rules: KeywordRules) -> Tuple[bool, str]:
    """Apply the decision rules in priority order; the first that matches wins."""
    lowered = description.lower()
    has_entry_keyword = contains_any(lowered, rules.entry_level_keywords)
    has_senior_keyword = contains_any(lowered, rules.senior_keywords)
    experience = extract_experience_years(description, rules)

    if has_entry_keyword and not has_senior_keyword:
        return True, REASON_ENTRY_KEYWORDS
    if has_senior_keyword:
        return False, REASON_SENIOR_KEYWORDS
    if experience.max_years > MAX_ENTRY_LEVEL_YEARS:
        return False, REASON_TOO_MANY_YEARS.format(years=experience.max_years)
    if experience.max_years > 0:
        return True, REASON_FEW_YEARS.format(years=experience.max_years)
    # No evidence either way
    return True, REASON_NO_SIGNAL


def classify(description: str, profile: Optional[Profile] = None,
             rules: Optional[KeywordRules] = None) -> ClassificationResult:
    """
    Classify a job description and draft an email when it is entry-level.

    Args:
        description: Free-text job description (may be empty)
        profile: Sender profile used to fill the email
        rules: Keyword tables; the configured defaults when omitted

    Returns:
        ClassificationResult; subject and body are empty when not entry-level
    """
    rules = rules or get_default_rules()
    profile = profile or Profile()
    description = description or ""

    is_entry_level, reason = decide(description, rules)
    if not is_entry_level:
        return ClassificationResult(is_entry_level=False, email_subject="", reason=reason, email_body="")

    draft = compose_email(description, profile)
    return ClassificationResult(
        is_entry_level=True,
        email_subject=draft.subject,
        reason=reason,
        email_body=draft.body,
    )


def _description_of(record: Any) -> str:
    if isinstance(record, Mapping):
        return record.get("description", "") or ""
    return getattr(record, "description", "") or ""


def classify_all(records: Iterable[Any], profile: Optional[Profile] = None,
                 rules: Optional[KeywordRules] = None) -> List[ClassificationResult]:
    """Classify every record in order, one result per record."""
    rules = rules or get_default_rules()
    return [classify(_description_of(record), profile, rules) for record in records]


def get_analysis_stats(results: Sequence[ClassificationResult]) -> AnalysisStats:
    """
    Count entry-level and skipped results.

    Raises ZeroDivisionError for an empty sequence; callers guard against it.
    """
    total = len(results)
    entry_level = sum(1 for r in results if r.is_entry_level)
    return AnalysisStats(
        total=total,
        entry_level=entry_level,
        skipped=total - entry_level,
        percentage=f"{entry_level / total * 100:.1f}",
    )
