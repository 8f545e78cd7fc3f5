"""
End-to-end tests for the pipeline orchestrator.
Capabilities are faked; everything else is the real pipeline.
"""
import asyncio

import pytest

from shopwell.ai.probe import CapabilityProbe
from shopwell.models.capability import Readiness
from shopwell.models.product import ProductRecord
from shopwell.models.profile import UserProfile
from shopwell.pipeline.orchestrator import (
    GENERIC_FAILURE_MESSAGE,
    NO_PRODUCT_MESSAGE,
    PipelineOrchestrator,
    PipelineState,
)
from shopwell.pipeline.safety import ALLERGEN_PREFIX, SafetyValidator
from shopwell.pipeline.verdict import DEFAULT_CAVEAT, PAD_BULLETS


AI_VERDICT = (
    'Here you go: {"verdict": "helpful", "bullets": ["Supports circulation", '
    '"Light to wear"], "caveat": "Check sizing.", "allergen_alert": false} Hope this helps!'
)


def offline_orchestrator(make_capability, display) -> PipelineOrchestrator:
    probe = CapabilityProbe(
        make_capability("summarizer", readiness=Readiness.NO),
        make_capability("prompt", readiness=Readiness.NO),
    )
    return PipelineOrchestrator(probe, display=display)


class ExplodingValidator(SafetyValidator):
    def validate_with_report(self, draft, facts, profile):
        raise RuntimeError("validator broke")


@pytest.mark.asyncio
class TestOfflineScenarios:
    """No capability ready: pattern extraction plus rules."""

    async def test_compression_socks(self, make_capability, display, compression_record, plain_profile):
        orchestrator = offline_orchestrator(make_capability, display)

        payload = await orchestrator.run(compression_record, plain_profile)

        assert payload.verdict == "helpful"
        assert len(payload.bullets) == 3
        assert payload.bullets[0] == "Compression garment - may support circulation"
        assert payload.confidence == "low"
        assert payload.caveat == DEFAULT_CAVEAT
        assert not payload.allergen_alert
        assert display.payloads == [payload]
        assert display.loading == 1

    async def test_peanut_allergy(self, make_capability, display, peanut_record, peanut_profile):
        orchestrator = offline_orchestrator(make_capability, display)

        payload = await orchestrator.run(peanut_record, peanut_profile)

        assert payload.verdict == "not_ideal"
        assert payload.allergen_alert
        assert payload.allergen_warnings == ["peanuts"]
        assert payload.caveat.startswith(f"{ALLERGEN_PREFIX}peanuts.")
        assert payload.bullets[0] == "Contains allergens: peanuts"
        assert payload.confidence == "high"

    async def test_title_only(self, make_capability, display, title_only_record, plain_profile):
        orchestrator = offline_orchestrator(make_capability, display)

        payload = await orchestrator.run(title_only_record, plain_profile)

        assert payload.verdict == "mixed"
        assert payload.bullets == PAD_BULLETS
        assert payload.confidence == "low"

    async def test_empty_record_still_analyzed(self, make_capability, display, plain_profile):
        orchestrator = offline_orchestrator(make_capability, display)

        payload = await orchestrator.run(ProductRecord(), plain_profile)

        assert payload.verdict == "mixed"
        assert display.errors == []

    async def test_condition_in_payload(self, make_capability, display, title_only_record):
        orchestrator = offline_orchestrator(make_capability, display)
        profile = UserProfile(condition="custom", custom_condition="Long COVID")

        payload = await orchestrator.run(title_only_record, profile)

        assert payload.condition == "Long COVID"

    async def test_report_records_strategies(self, make_capability, display, title_only_record, plain_profile):
        orchestrator = offline_orchestrator(make_capability, display)

        await orchestrator.run(title_only_record, plain_profile)
        report = orchestrator.last_report

        assert report.fact_strategy == "pattern"
        assert report.verdict_strategy == "rules"
        assert report.completed_at is not None
        assert report.error is None


@pytest.mark.asyncio
class TestAIScenarios:
    """Capabilities ready, with and without failures."""

    async def test_full_ai_path(self, make_capability, display, compression_record, plain_profile):
        summarizer = make_capability("summarizer", response="Lightweight compression socks.")
        prompt = make_capability("prompt", response=AI_VERDICT)
        orchestrator = PipelineOrchestrator(CapabilityProbe(summarizer, prompt), display=display)

        payload = await orchestrator.run(compression_record, plain_profile)

        assert payload.verdict == "helpful"
        assert payload.bullets == ["Supports circulation", "Light to wear"]
        assert payload.caveat == "Check sizing."
        assert orchestrator.last_report.fact_strategy == "summarizer"
        assert orchestrator.last_report.verdict_strategy == "prompt"
        assert len(summarizer.calls) == 1
        assert len(prompt.calls) == 1

    async def test_language_reaches_capabilities(self, make_capability, display, compression_record, plain_profile):
        summarizer = make_capability("summarizer", response="Compression socks.")
        prompt = make_capability("prompt", response=AI_VERDICT)
        orchestrator = PipelineOrchestrator(CapabilityProbe(summarizer, prompt), display=display)

        await orchestrator.run(compression_record, plain_profile, language="es")

        assert "Spanish" in summarizer.calls[0][1]
        assert "Spanish" in prompt.calls[0][1]

    async def test_ai_cannot_skip_allergen_override(self, make_capability, display, peanut_record, peanut_profile):
        summarizer = make_capability("summarizer", response="A tasty snack mix.")
        prompt = make_capability("prompt", response=AI_VERDICT)
        orchestrator = PipelineOrchestrator(CapabilityProbe(summarizer, prompt), display=display)

        payload = await orchestrator.run(peanut_record, peanut_profile)

        assert payload.verdict == "not_ideal"
        assert payload.allergen_alert
        assert payload.caveat.startswith(ALLERGEN_PREFIX)

    async def test_summarizer_failure_falls_back(self, make_capability, display, compression_record, plain_profile):
        summarizer = make_capability("summarizer", error=ConnectionError("model crashed"))
        orchestrator = PipelineOrchestrator(
            CapabilityProbe(summarizer, make_capability("prompt", readiness=Readiness.NO)),
            display=display,
        )

        payload = await orchestrator.run(compression_record, plain_profile)

        assert payload.verdict == "helpful"
        assert orchestrator.last_report.fact_strategy == "pattern"
        assert display.errors == []

    async def test_summarizer_timeout_falls_back(self, make_capability, display, compression_record, plain_profile):
        summarizer = make_capability("summarizer", response="late", delay=1.0)
        orchestrator = PipelineOrchestrator(
            CapabilityProbe(summarizer, None),
            display=display,
            call_timeout=0.05,
        )

        payload = await orchestrator.run(compression_record, plain_profile)

        assert payload is not None
        assert orchestrator.last_report.fact_strategy == "pattern"

    async def test_malformed_verdict_falls_back(self, make_capability, display, compression_record, plain_profile):
        prompt = make_capability("prompt", response="I'm sorry, I can't help with that.")
        orchestrator = PipelineOrchestrator(
            CapabilityProbe(make_capability("summarizer", readiness=Readiness.NO), prompt),
            display=display,
        )

        payload = await orchestrator.run(compression_record, plain_profile)

        assert payload.verdict == "helpful"
        assert orchestrator.last_report.verdict_strategy == "rules"
        assert len(prompt.calls) == 1

    async def test_probe_errors_fall_back(self, make_capability, display, title_only_record, plain_profile):
        summarizer = make_capability("summarizer", availability_error=RuntimeError("boom"))
        orchestrator = PipelineOrchestrator(CapabilityProbe(summarizer, None), display=display)

        payload = await orchestrator.run(title_only_record, plain_profile)

        assert payload.verdict == "mixed"
        assert summarizer.calls == []
        assert "summarizer_error" in orchestrator.last_report.capabilities.diagnostics


@pytest.mark.asyncio
class TestRunLifecycle:
    """State machine and error reporting."""

    async def test_missing_record(self, make_capability, display, plain_profile):
        summarizer = make_capability("summarizer")
        orchestrator = PipelineOrchestrator(CapabilityProbe(summarizer, None), display=display)

        payload = await orchestrator.run(None, plain_profile)

        assert payload is None
        assert display.errors == [NO_PRODUCT_MESSAGE]
        assert summarizer.availability_checks == 0
        assert orchestrator.state is PipelineState.IDLE

    async def test_internal_error_shows_generic_message(self, make_capability, display, title_only_record, plain_profile):
        probe = CapabilityProbe(make_capability("summarizer", readiness=Readiness.NO), None)
        orchestrator = PipelineOrchestrator(probe, display=display, validator=ExplodingValidator())

        payload = await orchestrator.run(title_only_record, plain_profile)

        assert payload is None
        assert display.errors == [GENERIC_FAILURE_MESSAGE]
        assert display.payloads == []
        assert orchestrator.state is PipelineState.IDLE
        assert "validator broke" in orchestrator.last_report.error

    async def test_probe_once_per_run(self, make_capability, display, title_only_record, plain_profile):
        summarizer = make_capability("summarizer", readiness=Readiness.NO)
        prompt = make_capability("prompt", readiness=Readiness.NO)
        orchestrator = PipelineOrchestrator(CapabilityProbe(summarizer, prompt), display=display)

        await orchestrator.run(title_only_record, plain_profile)
        await orchestrator.run(title_only_record, plain_profile)

        assert summarizer.availability_checks == 2
        assert prompt.availability_checks == 2
        assert len(display.payloads) == 2

    async def test_trigger_while_running_is_dropped(self, make_capability, display, compression_record, plain_profile):
        gate = asyncio.Event()
        summarizer = make_capability("summarizer", response="Compression socks.", gate=gate)
        orchestrator = PipelineOrchestrator(CapabilityProbe(summarizer, None), display=display)

        first = asyncio.create_task(orchestrator.run(compression_record, plain_profile))
        await asyncio.sleep(0)
        assert orchestrator.state is PipelineState.RUNNING

        second = await orchestrator.run(compression_record, plain_profile)
        assert second is None

        gate.set()
        payload = await first

        assert payload is not None
        assert display.loading == 1
        assert len(display.payloads) == 1
        assert orchestrator.state is PipelineState.IDLE

    async def test_runs_again_after_failure(self, make_capability, display, title_only_record, plain_profile):
        probe = CapabilityProbe(make_capability("summarizer", readiness=Readiness.NO), None)
        orchestrator = PipelineOrchestrator(probe, display=display, validator=ExplodingValidator())
        await orchestrator.run(title_only_record, plain_profile)

        orchestrator.validator = SafetyValidator()
        payload = await orchestrator.run(title_only_record, plain_profile)

        assert payload is not None
        assert display.loading == 2
