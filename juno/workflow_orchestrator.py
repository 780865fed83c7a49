"""
Lead Campaign Workflow Orchestrator

Drives a list of imported leads through classification, either with the
local rule-based classifier or one at a time through the LLM classifier with
retry and pacing, and tracks the status of every lead.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .ai_processing import (
    AnalysisStats, ClassificationResult, KeywordRules, LLMError, LLMJobClassifier,
    RateLimitError, classify, get_analysis_stats
)
from .lead_parser import RawRecord
from .profile import Profile
from .utils import RateLimitConfig, get_logger, get_progress_logger, pace, retry_with_backoff

logger = get_logger(__name__)


class LeadStatus(Enum):
    """Processing status of a lead."""
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class AnalyzedLead:
    """An imported lead together with its classification state."""
    id: str
    email: str
    phone: str
    description: str
    status: LeadStatus = LeadStatus.PENDING
    is_entry_level: bool = False
    email_subject: str = ""
    email_body: str = ""
    rejection_reason: str = ""
    error: Optional[str] = None

    @classmethod
    def from_record(cls, lead_id: str, record: RawRecord) -> "AnalyzedLead":
        return cls(id=lead_id, email=record.email, phone=record.phone, description=record.description)

    @property
    def is_finished(self) -> bool:
        return self.status in (LeadStatus.COMPLETED, LeadStatus.SKIPPED)

    @property
    def needs_processing(self) -> bool:
        return self.status in (LeadStatus.PENDING, LeadStatus.ERROR)

    def apply_result(self, result: ClassificationResult) -> None:
        self.status = LeadStatus.COMPLETED if result.is_entry_level else LeadStatus.SKIPPED
        self.is_entry_level = result.is_entry_level
        self.email_subject = result.email_subject
        self.email_body = result.email_body
        self.rejection_reason = result.reason
        self.error = None

    def result(self) -> Optional[ClassificationResult]:
        """The classification of a finished lead."""
        if not self.is_finished:
            return None
        return ClassificationResult(
            is_entry_level=self.is_entry_level,
            email_subject=self.email_subject,
            reason=self.rejection_reason,
            email_body=self.email_body,
        )


class LeadCampaign:
    """A batch of leads processed in input order."""

    def __init__(self, leads: List[AnalyzedLead], batch_id: Optional[str] = None):
        self.leads = leads
        self.batch_id = batch_id or f"batch_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        self.progress_callbacks: List[Callable[[str, Dict[str, Any]], None]] = []

    @classmethod
    def from_records(cls, records: Iterable[RawRecord], batch_id: Optional[str] = None) -> "LeadCampaign":
        leads = [AnalyzedLead.from_record(str(index), record) for index, record in enumerate(records)]
        return cls(leads, batch_id)

    def add_progress_callback(self, callback: Callable[[str, Dict[str, Any]], None]):
        """Add a progress callback function."""
        self.progress_callbacks.append(callback)

    def _notify_progress(self, event_type: str, data: Dict[str, Any]):
        for callback in self.progress_callbacks:
            try:
                callback(event_type, data)
            except Exception as e:
                logger.error(f"Error in progress callback: {e}")

    def pending_leads(self) -> List[AnalyzedLead]:
        return [lead for lead in self.leads if lead.needs_processing]

    def process_local(self, profile: Optional[Profile] = None,
                      rules: Optional[KeywordRules] = None) -> List[AnalyzedLead]:
        """Classify every pending lead with the rule-based classifier."""
        pending = self.pending_leads()
        logger.batch_started(self.batch_id, len(pending))
        self._notify_progress("batch_started", {"batch_id": self.batch_id, "total_leads": len(pending)})

        for lead in pending:
            lead.apply_result(classify(lead.description, profile, rules))
            self._notify_progress("lead_completed", {"lead_id": lead.id, "status": lead.status.value})

        logger.batch_completed(self.batch_id, len(pending), 0)
        self._notify_progress("batch_completed", {"batch_id": self.batch_id, "processed": len(pending)})
        return pending

    async def process_with_llm(self, profile: Optional[Profile] = None,
                               classifier: Optional[LLMJobClassifier] = None,
                               config: Optional[RateLimitConfig] = None,
                               sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> List[AnalyzedLead]:
        """
        Classify pending leads one at a time through the LLM classifier.

        Rate-limited calls are retried with exponential backoff. A lead whose
        call still fails is marked as an error and the campaign moves on;
        running the campaign again only retries pending and failed leads.

        Args:
            profile: Sender profile passed to the LLM
            classifier: LLM classifier (a default one is created if omitted)
            config: Retry and pacing configuration
            sleep: Awaitable sleep, replaced in tests

        Returns:
            The leads that were processed in this run
        """
        classifier = classifier or LLMJobClassifier()
        config = config or RateLimitConfig()
        pending = self.pending_leads()
        errors = 0

        logger.batch_started(self.batch_id, len(pending))
        self._notify_progress("batch_started", {"batch_id": self.batch_id, "total_leads": len(pending)})
        progress = get_progress_logger(logger, len(pending), "LLM analysis")

        for position, lead in enumerate(pending):
            lead.status = LeadStatus.ANALYZING
            logger.lead_started(lead.id, lead.email)
            self._notify_progress("lead_started", {"lead_id": lead.id, "email": lead.email})

            def on_retry(attempt: int, delay: float, error: BaseException, lead_id: str = lead.id):
                self._notify_progress("lead_retrying", {"lead_id": lead_id, "attempt": attempt, "delay": delay})

            try:
                result = await retry_with_backoff(
                    lambda: classifier.classify(lead.description, profile),
                    config=config,
                    is_retryable=lambda e: isinstance(e, RateLimitError),
                    sleep=sleep,
                    on_retry=on_retry,
                )
            except (LLMError, asyncio.TimeoutError) as e:
                errors += 1
                lead.status = LeadStatus.ERROR
                lead.error = str(e) or e.__class__.__name__
                logger.error(f"Failed to process {lead.email}: {lead.error}")
                self._notify_progress("lead_failed", {"lead_id": lead.id, "error": lead.error})
                logger.lead_completed(lead.id, lead.status.value)
                progress.update()
                continue

            lead.apply_result(result)
            logger.lead_completed(lead.id, lead.status.value)
            self._notify_progress("lead_completed", {"lead_id": lead.id, "status": lead.status.value})
            progress.update(message=f"Processed {lead.email}")

            if position < len(pending) - 1:
                await pace(config, sleep)

        progress.complete()
        logger.batch_completed(self.batch_id, len(pending) - errors, errors)
        self._notify_progress("batch_completed", {
            "batch_id": self.batch_id,
            "processed": len(pending) - errors,
            "errors": errors
        })
        return pending

    def results(self) -> List[ClassificationResult]:
        """Classification results of the finished leads, in lead order."""
        return [lead.result() for lead in self.leads if lead.is_finished]

    def stats(self) -> Optional[AnalysisStats]:
        """Summary of the finished leads, or None if nothing has finished yet."""
        results = self.results()
        if not results:
            return None
        return get_analysis_stats(results)

    def drafted_leads(self) -> List[AnalyzedLead]:
        return [lead for lead in self.leads if lead.status == LeadStatus.COMPLETED and lead.email_body]
