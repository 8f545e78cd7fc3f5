"""Pipeline modules for product analysis."""

from .extraction import (
    FactExtractor,
    SummarizerFactExtractor,
    PatternFactExtractor,
    build_summary_input,
    parse_facts,
)
from .verdict import (
    VerdictGenerator,
    PromptVerdictGenerator,
    RuleVerdictGenerator,
    extract_json_object,
    parse_verdict_response,
)
from .safety import SafetyValidator, ValidationClamp
from .orchestrator import (
    PipelineOrchestrator,
    PipelineState,
    DisplaySink,
    NullDisplay,
    RunReport,
)

__all__ = [
    "FactExtractor",
    "SummarizerFactExtractor",
    "PatternFactExtractor",
    "build_summary_input",
    "parse_facts",
    "VerdictGenerator",
    "PromptVerdictGenerator",
    "RuleVerdictGenerator",
    "extract_json_object",
    "parse_verdict_response",
    "SafetyValidator",
    "ValidationClamp",
    "PipelineOrchestrator",
    "PipelineState",
    "DisplaySink",
    "NullDisplay",
    "RunReport",
]
