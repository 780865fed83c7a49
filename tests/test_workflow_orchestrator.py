"""
Tests for the lead campaign workflow.

LLM processing runs against a scripted classifier and a recording sleep so
retry delays and pacing can be asserted without waiting.
"""

import asyncio

from juno.ai_processing import (
    ClassificationResult, LLMError, LLMJobClassifier, LLMManager, LLMProvider, RateLimitError
)
from juno.config import LLMConfig
from juno.lead_parser import RawRecord
from juno.utils import RateLimitConfig
from juno.workflow_orchestrator import AnalyzedLead, LeadCampaign, LeadStatus


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def accepted(subject="Application"):
    return ClassificationResult(is_entry_level=True, email_subject=subject, reason="ok", email_body="Hello")


def rejected():
    return ClassificationResult(is_entry_level=False, email_subject="", reason="too senior", email_body="")


class ScriptedClassifier:
    """Plays back outcomes per description; exceptions are raised, results returned."""

    def __init__(self, script):
        self.script = {key: list(outcomes) for key, outcomes in script.items()}
        self.calls = []

    async def classify(self, description, profile=None):
        self.calls.append(description)
        outcome = self.script[description].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_campaign(*descriptions):
    records = [RawRecord(email=f"lead{i}@example.com", phone="", description=d) for i, d in enumerate(descriptions)]
    return LeadCampaign.from_records(records, batch_id="test")


class TestAnalyzedLead:

    def test_from_record(self):
        lead = AnalyzedLead.from_record("3", RawRecord(email="a@b.com", phone="1", description="Job"))

        assert lead.id == "3"
        assert lead.status == LeadStatus.PENDING
        assert lead.needs_processing
        assert lead.result() is None

    def test_apply_rejection(self):
        lead = AnalyzedLead.from_record("0", RawRecord(email="a@b.com", phone="", description=""))
        lead.apply_result(rejected())

        assert lead.status == LeadStatus.SKIPPED
        assert lead.rejection_reason == "too senior"
        assert lead.result() == rejected()


class TestLocalProcessing:

    def test_classifies_every_lead(self, full_profile):
        campaign = make_campaign("Senior architect", "Junior designer", "")
        campaign.process_local(full_profile)

        assert [lead.status for lead in campaign.leads] == [
            LeadStatus.SKIPPED, LeadStatus.COMPLETED, LeadStatus.COMPLETED
        ]
        assert [lead.id for lead in campaign.drafted_leads()] == ["1", "2"]

        stats = campaign.stats()
        assert stats.total == 3
        assert stats.entry_level == 2
        assert stats.percentage == "66.7"

    def test_stats_before_processing(self):
        assert make_campaign("Junior designer").stats() is None

    def test_progress_events(self):
        events = []
        campaign = make_campaign("Junior designer")
        campaign.add_progress_callback(lambda event, data: events.append(event))
        campaign.process_local()

        assert events == ["batch_started", "lead_completed", "batch_completed"]

    def test_failing_callback_does_not_stop_processing(self):
        def broken(event, data):
            raise RuntimeError("display went away")

        campaign = make_campaign("Junior designer")
        campaign.add_progress_callback(broken)
        campaign.process_local()

        assert campaign.leads[0].status == LeadStatus.COMPLETED


class TestLLMProcessing:

    def test_retry_error_and_pacing(self):
        classifier = ScriptedClassifier({
            "first": [RateLimitError("429"), accepted()],
            "second": [LLMError("bad response")],
            "third": [rejected()],
        })
        sleep = RecordingSleep()
        campaign = make_campaign("first", "second", "third")

        processed = asyncio.run(campaign.process_with_llm(classifier=classifier, config=RateLimitConfig(), sleep=sleep))

        assert len(processed) == 3
        assert [lead.status for lead in campaign.leads] == [
            LeadStatus.COMPLETED, LeadStatus.ERROR, LeadStatus.SKIPPED
        ]
        assert campaign.leads[1].error == "bad response"
        assert classifier.calls == ["first", "first", "second", "third"]
        # backoff for the rate limit, then pacing after the first success only
        assert sleep.delays == [4.0, 1.5]

    def test_rerun_only_processes_failed_leads(self):
        classifier = ScriptedClassifier({
            "first": [accepted()],
            "second": [LLMError("timeout"), accepted("Second try")],
        })
        campaign = make_campaign("first", "second")
        asyncio.run(campaign.process_with_llm(classifier=classifier, sleep=RecordingSleep()))

        processed = asyncio.run(campaign.process_with_llm(classifier=classifier, sleep=RecordingSleep()))

        assert [lead.id for lead in processed] == ["1"]
        assert campaign.leads[1].status == LeadStatus.COMPLETED
        assert campaign.leads[1].email_subject == "Second try"
        assert campaign.leads[1].error is None

    def test_rate_limit_exhaustion_marks_error(self):
        classifier = ScriptedClassifier({"only": [RateLimitError("429")] * 4})
        sleep = RecordingSleep()
        campaign = make_campaign("only")

        asyncio.run(campaign.process_with_llm(classifier=classifier, sleep=sleep))

        assert campaign.leads[0].status == LeadStatus.ERROR
        assert sleep.delays == [4.0, 8.0, 16.0]
        assert campaign.stats() is None

    def test_retry_events(self):
        events = []
        classifier = ScriptedClassifier({"only": [RateLimitError("429"), accepted()]})
        campaign = make_campaign("only")
        campaign.add_progress_callback(lambda event, data: events.append((event, data)))

        asyncio.run(campaign.process_with_llm(classifier=classifier, sleep=RecordingSleep()))

        names = [event for event, _ in events]
        assert names == ["batch_started", "lead_started", "lead_retrying", "lead_completed", "batch_completed"]
        assert events[2][1] == {"lead_id": "0", "attempt": 1, "delay": 4.0}
        assert events[-1][1]["errors"] == 0

    def test_provider_error_bodies_mark_leads_failed(self, monkeypatch):
        async def overloaded(self, url, headers, payload):
            return {"error": {"message": "upstream overloaded", "code": 502}}, None

        monkeypatch.setattr(LLMProvider, "_post", overloaded)
        classifier = LLMJobClassifier(LLMManager(LLMConfig(openrouter_api_key="o-key")))
        campaign = make_campaign("Junior designer", "Design intern")

        processed = asyncio.run(campaign.process_with_llm(classifier=classifier, sleep=RecordingSleep()))

        assert len(processed) == 2
        assert [lead.status for lead in campaign.leads] == [LeadStatus.ERROR, LeadStatus.ERROR]
        assert "upstream overloaded" in campaign.leads[0].error
        assert all(lead.needs_processing for lead in campaign.leads)

    def test_malformed_provider_body_marks_lead_failed(self, monkeypatch):
        async def truncated(self, url, headers, payload):
            return {"choices": []}, None

        monkeypatch.setattr(LLMProvider, "_post", truncated)
        classifier = LLMJobClassifier(LLMManager(LLMConfig(openrouter_api_key="o-key")))
        campaign = make_campaign("Junior designer")

        asyncio.run(campaign.process_with_llm(classifier=classifier, sleep=RecordingSleep()))

        assert campaign.leads[0].status == LeadStatus.ERROR
        assert "Unexpected OpenRouter response" in campaign.leads[0].error
