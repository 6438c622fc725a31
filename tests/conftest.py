"""
Pytest configuration and fixtures for agentic RAG tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path so we can import the agentic_rag package
sys.path.insert(0, str(Path(__file__).parent.parent))

from agentic_rag.backend import BackendResponse, InMemoryBackend
from agentic_rag.config import AgenticRAGConfig
from agentic_rag.decisions import DecisionExecutor, EnhancedContext
from agentic_rag.orchestrator import AgenticRAGOrchestrator
from agentic_rag.types import DecisionType


class FailingBackend(InMemoryBackend):
    """Backend whose send_message always raises."""

    async def send_message(self, text, *, enhanced_context, selected_models, agentic_mode):
        raise ConnectionError("backend unreachable")


class UnsuccessfulBackend(InMemoryBackend):
    """Backend that reports failure without raising."""

    async def send_message(self, text, *, enhanced_context, selected_models, agentic_mode):
        return BackendResponse(success=False, error="rate limited")


class FailingMemoryBackend(InMemoryBackend):
    """Backend whose memory store is unavailable."""

    async def load_personal_memories(self, user_id):
        raise TimeoutError("memory store timed out")


class FailingExecutor(DecisionExecutor):
    """Executor that raises for a given decision type."""

    def __init__(self, decision_type: DecisionType):
        self.decision_type = decision_type

    async def execute(self, decision, user_id):
        raise RuntimeError(f"{self.decision_type.value} exploded")

    def apply(self, result, context: EnhancedContext) -> None:
        raise AssertionError("apply must not be reached")


@pytest.fixture
def backend():
    """In-memory backend with a couple of stored memories."""
    backend = InMemoryBackend()
    backend.add_memory("alice", "Prefers Python examples", confidence=0.9)
    backend.add_memory("alice", "Works on a VS Code extension", confidence=0.7)
    return backend


@pytest.fixture
def config():
    """Default configuration."""
    return AgenticRAGConfig()


@pytest.fixture
def orchestrator(backend, config):
    """Orchestrator over the in-memory backend."""
    return AgenticRAGOrchestrator(backend, config=config)


@pytest.fixture
def failing_backend():
    return FailingBackend()


@pytest.fixture
def unsuccessful_backend():
    return UnsuccessfulBackend()


@pytest.fixture
def failing_memory_backend():
    return FailingMemoryBackend()


@pytest.fixture
def failing_executor_factory():
    """Build executors that raise for a decision type."""
    return FailingExecutor


# Markers
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "hypothesis: property-based tests"
    )
    config.addinivalue_line(
        "markers", "slow: tests that take >1s"
    )
