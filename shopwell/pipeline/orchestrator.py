"""
Pipeline orchestrator - runs one product analysis end to end.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel, Field

from ..ai.capabilities import TextCapability
from ..ai.probe import CapabilityProbe
from ..models.capability import AnalysisContext, CapabilitySet
from ..models.facts import FactSet
from ..models.product import ProductRecord
from ..models.profile import UserProfile
from ..models.verdict import AnalysisPayload, Verdict

from .extraction import FactExtractor, PatternFactExtractor, SummarizerFactExtractor
from .verdict import PromptVerdictGenerator, RuleVerdictGenerator, VerdictGenerator
from .safety import SafetyValidator, ValidationClamp


logger = logging.getLogger(__name__)

S = TypeVar("S")
R = TypeVar("R")


GENERIC_FAILURE_MESSAGE = "Analysis failed. Please try again or check your AI settings."
NO_PRODUCT_MESSAGE = (
    "Unable to analyze this product page. Make sure you're on a supported product page."
)


class PipelineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class DisplaySink(ABC):
    """Receives the outcome of a run. The UI panel implements this."""

    @abstractmethod
    def show_loading(self) -> None:
        ...

    @abstractmethod
    def show_analysis(self, payload: AnalysisPayload) -> None:
        ...

    @abstractmethod
    def show_error(self, message: str) -> None:
        ...


class NullDisplay(DisplaySink):
    """Discards everything; for headless runs."""

    def show_loading(self) -> None:
        pass

    def show_analysis(self, payload: AnalysisPayload) -> None:
        pass

    def show_error(self, message: str) -> None:
        pass


class RunReport(BaseModel):
    """What the last run did, for the debug panel. Never persisted."""
    run_id: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    capabilities: Optional[CapabilitySet] = None
    facts: Optional[FactSet] = None
    fact_strategy: Optional[str] = None
    verdict_strategy: Optional[str] = None
    verdict: Optional[Verdict] = None
    clamps: list[ValidationClamp] = Field(default_factory=list)
    error: Optional[str] = None


class PipelineOrchestrator:
    """
    Sequences probe -> extract -> generate -> validate -> display.

    The orchestrator alone owns the Idle/Running state. A run() issued while
    another is in flight is dropped, not queued, and every run ends in Idle.
    """

    def __init__(
        self,
        probe: CapabilityProbe,
        display: Optional[DisplaySink] = None,
        validator: Optional[SafetyValidator] = None,
        call_timeout: Optional[float] = None,
    ):
        self.probe = probe
        self.display = display or NullDisplay()
        self.validator = validator or SafetyValidator()
        self.call_timeout = call_timeout

        self.pattern_extractor = PatternFactExtractor()
        self.rule_generator = RuleVerdictGenerator()

        self._state = PipelineState.IDLE
        self.last_report: Optional[RunReport] = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def summarizer(self) -> Optional[TextCapability]:
        return self.probe.summarizer

    @property
    def prompt(self) -> Optional[TextCapability]:
        return self.probe.prompt

    def plan_fact_extractors(self, capabilities: CapabilitySet) -> list[FactExtractor]:
        """Preferred strategy first, deterministic fallback always last."""
        chain: list[FactExtractor] = []
        if capabilities.summarizer_ready and self.summarizer is not None:
            chain.append(SummarizerFactExtractor(self.summarizer, timeout=self.call_timeout))
        chain.append(self.pattern_extractor)
        return chain

    def plan_verdict_generators(self, capabilities: CapabilitySet) -> list[VerdictGenerator]:
        chain: list[VerdictGenerator] = []
        if capabilities.prompt_ready and self.prompt is not None:
            chain.append(PromptVerdictGenerator(self.prompt, timeout=self.call_timeout))
        chain.append(self.rule_generator)
        return chain

    async def run(
        self,
        record: Optional[ProductRecord],
        profile: UserProfile,
        language: str = "en",
    ) -> Optional[AnalysisPayload]:
        """
        Analyze one product for one profile.

        Returns:
            The payload handed to the display, or None when the run was
            dropped or failed
        """
        if self._state is PipelineState.RUNNING:
            logger.info("Analysis already running, trigger dropped")
            return None

        self._state = PipelineState.RUNNING
        report = RunReport(run_id=str(uuid.uuid4())[:8], started_at=datetime.now())
        self.last_report = report

        try:
            self.display.show_loading()

            if record is None:
                logger.warning("No product data to analyze")
                report.error = "no product data"
                self.display.show_error(NO_PRODUCT_MESSAGE)
                return None

            logger.info(f"Starting analysis run {report.run_id}")
            payload = await self._analyze(record, profile, language, report)
            self.display.show_analysis(payload)
            logger.info(f"Analysis run {report.run_id} completed: {payload.verdict}")
            return payload

        except Exception as e:
            logger.error(f"Analysis run {report.run_id} failed: {type(e).__name__}: {e}")
            report.error = f"{type(e).__name__}: {e}"
            self.display.show_error(GENERIC_FAILURE_MESSAGE)
            return None

        finally:
            report.completed_at = datetime.now()
            self._state = PipelineState.IDLE

    async def _analyze(
        self,
        record: ProductRecord,
        profile: UserProfile,
        language: str,
        report: RunReport,
    ) -> AnalysisPayload:
        # Step 1: Probe
        capabilities = await self.probe.probe()
        report.capabilities = capabilities
        context = AnalysisContext(profile=profile, capabilities=capabilities, language=language)

        # Step 2: Facts
        facts, report.fact_strategy = await self._first_result(
            self.plan_fact_extractors(capabilities),
            lambda extractor: extractor.extract(record, context),
        )
        report.facts = facts
        logger.info(
            f"Facts via {report.fact_strategy}: confidence={facts.confidence} "
            f"flags={facts.active_flags} allergens={len(facts.allergen_warnings)}"
        )

        # Step 3: Draft verdict
        draft, report.verdict_strategy = await self._first_result(
            self.plan_verdict_generators(capabilities),
            lambda generator: generator.generate(facts, context),
        )
        logger.info(f"Draft verdict via {report.verdict_strategy}: {draft.verdict}")

        # Step 4: Validate
        verdict, report.clamps = self.validator.validate_with_report(draft, facts, profile)
        report.verdict = verdict

        return AnalysisPayload.assemble(
            verdict,
            condition=profile.resolved_condition,
            allergen_warnings=facts.allergen_warnings,
            confidence=facts.confidence,
        )

    async def _first_result(
        self,
        chain: list[S],
        call: Callable[[S], Awaitable[Optional[R]]],
    ) -> tuple[R, str]:
        """
        Try each strategy in order; a None or an exception moves on to the
        next. The last strategy is the fallback and is not guarded.
        """
        *preferred, fallback = chain

        for strategy in preferred:
            name = getattr(strategy, "name", type(strategy).__name__)
            try:
                result = await call(strategy)
            except Exception as e:
                logger.warning(f"{name} strategy raised, falling back: {type(e).__name__}: {e}")
                continue
            if result is not None:
                return result, name
            logger.info(f"{name} strategy produced nothing, falling back")

        result = await call(fallback)
        if result is None:
            raise RuntimeError(f"Fallback strategy {fallback.name} returned nothing")
        return result, fallback.name
