"""
Static catalog of the specialist models requests can be routed to.

Seven profiles, each with capability tags, context/output limits and a
specialty. The registry is read-only once the module is imported.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .types import CostTier, LatencyTier, ModelCapability, UnknownModelError


@dataclass(frozen=True)
class ModelProfile:
    """A routable model with metadata."""

    key: str  # Registry key (e.g., "conductor")
    id: str  # Provider model id
    name: str
    context_window: int  # Tokens
    output_limit: int  # Tokens
    capabilities: frozenset[ModelCapability]
    latency_tier: LatencyTier
    cost_tier: CostTier
    specialty: str
    features: tuple[str, ...] = field(default_factory=tuple)
    notes: str = ""

    def has_capability(self, capability: ModelCapability) -> bool:
        return capability in self.capabilities

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "key": self.key,
            "id": self.id,
            "name": self.name,
            "context_window": self.context_window,
            "output_limit": self.output_limit,
            "capabilities": sorted(c.value for c in self.capabilities),
            "latency_tier": self.latency_tier.name.lower(),
            "cost_tier": self.cost_tier.name.lower(),
            "specialty": self.specialty,
        }


ORCHESTRATOR_MODEL = "conductor"
DEEP_THINKER_MODEL = "deep_thinker_primary"
SPEED_MODEL = "speed_demon_primary"
CREATIVE_MODEL = "creative_writer_primary"
CONTEXT_MODEL = "context_master_primary"
CODE_MODEL = "code_specialist_primary"
INTEGRATION_MODEL = "integration_master_primary"

_STANDARD_FEATURES = (
    "generateContent",
    "countTokens",
    "createCachedContent",
    "batchGenerateContent",
)

_PROFILES: tuple[ModelProfile, ...] = (
    ModelProfile(
        key=ORCHESTRATOR_MODEL,
        id="models/gemini-2.5-pro-exp-12-05",
        name="Gemini 2.5 Pro (Latest)",
        context_window=2_097_152,
        output_limit=8192,
        capabilities=frozenset(
            {
                ModelCapability.REASONING,
                ModelCapability.CODE_GENERATION,
                ModelCapability.DOCUMENT_ANALYSIS,
                ModelCapability.BATCH_PROCESSING,
                ModelCapability.CACHED_CONTENT,
            }
        ),
        latency_tier=LatencyTier.MEDIUM,
        cost_tier=CostTier.MEDIUM,
        specialty="strategic_orchestration_and_planning",
        features=_STANDARD_FEATURES,
        notes="Conductor for complex routing and strategic decisions",
    ),
    ModelProfile(
        key=DEEP_THINKER_MODEL,
        id="models/gemini-2.0-flash-thinking-exp-01-21",
        name="Gemini 2.0 Flash Thinking",
        context_window=1_048_576,
        output_limit=65536,
        capabilities=frozenset(
            {
                ModelCapability.THINKING,
                ModelCapability.REASONING,
                ModelCapability.LONG_OUTPUT,
                ModelCapability.CODE_GENERATION,
                ModelCapability.BATCH_PROCESSING,
                ModelCapability.CACHED_CONTENT,
            }
        ),
        latency_tier=LatencyTier.SLOW,
        cost_tier=CostTier.MEDIUM,
        specialty="complex_reasoning_and_architecture",
        features=_STANDARD_FEATURES,
        notes="Complex debugging and architectural decisions",
    ),
    ModelProfile(
        key=SPEED_MODEL,
        id="models/gemini-2.0-flash-lite",
        name="Gemini 2.0 Flash Lite",
        context_window=1_048_576,
        output_limit=8192,
        capabilities=frozenset(
            {
                ModelCapability.SPEED,
                ModelCapability.BATCH_PROCESSING,
                ModelCapability.CACHED_CONTENT,
            }
        ),
        latency_tier=LatencyTier.ULTRA_FAST,
        cost_tier=CostTier.LOW,
        specialty="instant_responses_and_quick_coding",
        features=_STANDARD_FEATURES,
        notes="Fastest profile, for instant chat and quick fixes",
    ),
    ModelProfile(
        key=CREATIVE_MODEL,
        id="models/gemini-2.5-flash-preview-05-20",
        name="Gemini 2.5 Flash Creative",
        context_window=1_048_576,
        output_limit=65536,
        capabilities=frozenset(
            {
                ModelCapability.CREATIVE,
                ModelCapability.LONG_OUTPUT,
                ModelCapability.CODE_GENERATION,
                ModelCapability.BATCH_PROCESSING,
                ModelCapability.CACHED_CONTENT,
            }
        ),
        latency_tier=LatencyTier.FAST,
        cost_tier=CostTier.MEDIUM,
        specialty="creative_solutions_and_long_form_content",
        features=_STANDARD_FEATURES,
        notes="Long-form content and documentation",
    ),
    ModelProfile(
        key=CONTEXT_MODEL,
        id="models/gemini-2.5-pro",
        name="Gemini 2.5 Pro (Context Master)",
        context_window=2_097_152,
        output_limit=8192,
        capabilities=frozenset(
            {
                ModelCapability.REASONING,
                ModelCapability.DOCUMENT_ANALYSIS,
                ModelCapability.CODE_GENERATION,
                ModelCapability.BATCH_PROCESSING,
                ModelCapability.CACHED_CONTENT,
            }
        ),
        latency_tier=LatencyTier.MEDIUM,
        cost_tier=CostTier.MEDIUM,
        specialty="massive_context_processing_and_analysis",
        features=_STANDARD_FEATURES,
        notes="Whole-codebase and large document processing",
    ),
    ModelProfile(
        key=CODE_MODEL,
        id="models/gemini-2.5-flash",
        name="Gemini 2.5 Flash (Code Specialist)",
        context_window=1_048_576,
        output_limit=8192,
        capabilities=frozenset(
            {
                ModelCapability.CODE_GENERATION,
                ModelCapability.SPEED,
                ModelCapability.BATCH_PROCESSING,
                ModelCapability.CACHED_CONTENT,
            }
        ),
        latency_tier=LatencyTier.FAST,
        cost_tier=CostTier.LOW,
        specialty="precise_code_generation_and_analysis",
        features=_STANDARD_FEATURES,
        notes="Precise programming tasks and code analysis",
    ),
    ModelProfile(
        key=INTEGRATION_MODEL,
        id="models/gemini-1.5-pro",
        name="Gemini 1.5 Pro (Integration Master)",
        context_window=2_097_152,
        output_limit=8192,
        capabilities=frozenset(
            {
                ModelCapability.DOCUMENT_ANALYSIS,
                ModelCapability.REASONING,
                ModelCapability.CODE_GENERATION,
                ModelCapability.BATCH_PROCESSING,
                ModelCapability.CACHED_CONTENT,
            }
        ),
        latency_tier=LatencyTier.MEDIUM,
        cost_tier=CostTier.MEDIUM,
        specialty="system_integration_and_documentation",
        features=_STANDARD_FEATURES,
        notes="System integration and comprehensive documentation",
    ),
)


def _build_registry(profiles: tuple[ModelProfile, ...]) -> Mapping[str, ModelProfile]:
    registry: dict[str, ModelProfile] = {}
    seen_ids: set[str] = set()
    for profile in profiles:
        if profile.key in registry:
            raise ValueError(f"Duplicate model key: {profile.key}")
        if profile.id in seen_ids:
            raise ValueError(f"Duplicate model id: {profile.id}")
        registry[profile.key] = profile
        seen_ids.add(profile.id)
    return MappingProxyType(registry)


MODEL_REGISTRY: Mapping[str, ModelProfile] = _build_registry(_PROFILES)


def get_model(key: str) -> ModelProfile:
    """Look up a profile by registry key."""
    try:
        return MODEL_REGISTRY[key]
    except KeyError:
        raise UnknownModelError(key) from None


def available_models() -> list[str]:
    """All registry keys in catalog order."""
    return list(MODEL_REGISTRY)


def models_by_capability(capability: ModelCapability) -> list[str]:
    """Keys of models carrying a capability."""
    return [key for key, profile in MODEL_REGISTRY.items() if profile.has_capability(capability)]


def fastest_models() -> list[str]:
    """Ultra-fast and fast models, fastest first."""
    fast = [
        profile
        for profile in MODEL_REGISTRY.values()
        if profile.latency_tier <= LatencyTier.FAST
    ]
    fast.sort(key=lambda p: p.latency_tier)
    return [p.key for p in fast]


def most_capable_models(limit: int = 3) -> list[str]:
    """Models with the most capability tags."""
    ranked = sorted(MODEL_REGISTRY.values(), key=lambda p: -len(p.capabilities))
    return [p.key for p in ranked[:limit]]


__all__ = [
    "CODE_MODEL",
    "CONTEXT_MODEL",
    "CREATIVE_MODEL",
    "DEEP_THINKER_MODEL",
    "INTEGRATION_MODEL",
    "MODEL_REGISTRY",
    "ModelProfile",
    "ORCHESTRATOR_MODEL",
    "SPEED_MODEL",
    "available_models",
    "fastest_models",
    "get_model",
    "models_by_capability",
    "most_capable_models",
]
