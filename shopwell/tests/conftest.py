"""
Shared pytest fixtures.

Fake capabilities stand in for the on-device models so every test runs
without a model server.
"""
import asyncio
import sys
from pathlib import Path
from typing import Optional

import pytest

# Make the project root importable without installing the package
PROJECT_ROOT = Path(__file__).parent.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from shopwell.ai.capabilities import CapabilitySession, TextCapability
from shopwell.config import reset_config
from shopwell.models.capability import Readiness
from shopwell.models.product import ProductRecord
from shopwell.models.profile import UserProfile
from shopwell.models.verdict import AnalysisPayload
from shopwell.pipeline.orchestrator import DisplaySink


class FakeSession(CapabilitySession):

    def __init__(self, owner: "FakeCapability", system_prompt: Optional[str]):
        self.owner = owner
        self.system_prompt = system_prompt

    async def run(self, text: str) -> str:
        self.owner.calls.append((text, self.system_prompt))
        if self.owner.gate is not None:
            await self.owner.gate.wait()
        if self.owner.delay:
            await asyncio.sleep(self.owner.delay)
        if self.owner.error is not None:
            raise self.owner.error
        return self.owner.response


class FakeCapability(TextCapability):
    """Scriptable capability: fixed readiness, fixed reply or error."""

    def __init__(
        self,
        name: str = "fake",
        readiness=Readiness.READILY,
        response: str = "",
        error: Optional[Exception] = None,
        availability_error: Optional[Exception] = None,
        delay: float = 0.0,
        gate: Optional[asyncio.Event] = None,
    ):
        self.name = name
        self.readiness = readiness
        self.response = response
        self.error = error
        self.availability_error = availability_error
        self.delay = delay
        self.gate = gate
        self.calls: list[tuple[str, Optional[str]]] = []
        self.availability_checks = 0

    async def availability(self):
        self.availability_checks += 1
        if self.availability_error is not None:
            raise self.availability_error
        return self.readiness

    async def create_session(self, system_prompt: Optional[str] = None) -> CapabilitySession:
        return FakeSession(self, system_prompt)


class RecordingDisplay(DisplaySink):
    """Keeps everything the pipeline shows."""

    def __init__(self):
        self.loading = 0
        self.payloads: list[AnalysisPayload] = []
        self.errors: list[str] = []

    def show_loading(self) -> None:
        self.loading += 1

    def show_analysis(self, payload: AnalysisPayload) -> None:
        self.payloads.append(payload)

    def show_error(self, message: str) -> None:
        self.errors.append(message)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Fresh config per test, settings file in a tmp directory."""
    monkeypatch.setenv("SHOPWELL_SETTINGS_PATH", str(tmp_path / "settings.json"))
    monkeypatch.setenv("SHOPWELL_LANGUAGE", "en")
    reset_config()
    yield
    reset_config()


@pytest.fixture
def make_capability():
    """Factory for FakeCapability instances."""
    return FakeCapability


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture
def peanut_record() -> ProductRecord:
    return ProductRecord(
        title="Crunchy Trail Mix",
        ingredients="contains peanut oil",
    )


@pytest.fixture
def compression_record() -> ProductRecord:
    return ProductRecord(
        title="Compression Socks",
        bullets=["lightweight", "ergonomic fit"],
    )


@pytest.fixture
def title_only_record() -> ProductRecord:
    return ProductRecord(title="Desk Lamp")


@pytest.fixture
def peanut_profile() -> UserProfile:
    return UserProfile(allergies=["peanuts"])


@pytest.fixture
def plain_profile() -> UserProfile:
    return UserProfile()
