"""
Request intent classification.

Every predicate is an independent, case-insensitive keyword or regex test
over the request text. No predicate depends on another and none keeps
state, so the orchestrator, the model router and the predictive engine
can all share this module.

Must be fast, so uses heuristics, not LLM calls.
"""

import re

from .types import RequestSignals

# Agentic decision patterns
EXPLANATION_PATTERN = re.compile(r"\b(how|what|explain|why|describe)\b", re.IGNORECASE)
CODE_PATTERN = re.compile(
    r"\b(code|function|class|method|implement|develop|program)\b", re.IGNORECASE
)
CREATIVE_PATTERN = re.compile(
    r"\b(create|design|generate|write|compose|build)\b", re.IGNORECASE
)
TOOL_PATTERN = re.compile(
    r"\b(search|analyze|test|deploy|install|configure)\b", re.IGNORECASE
)
SYSTEM_KNOWLEDGE_PATTERN = re.compile(
    r"\b(documentation|api|reference|standard|best practice)\b", re.IGNORECASE
)
CONCEPTUAL_PATTERN = re.compile(
    r"\b(concept|idea|theory|approach|methodology)\b", re.IGNORECASE
)
HIGH_PRECISION_PATTERN = re.compile(
    r"\b(exactly|precisely|specific|accurate|correct)\b", re.IGNORECASE
)
COMPLEX_PATTERN = re.compile(r"\b(complex|advanced|detailed|comprehensive)\b", re.IGNORECASE)
COMPLEXITY_KEYWORD_PATTERN = re.compile(
    r"\b(complex|advanced|detailed|comprehensive|sophisticated)\b", re.IGNORECASE
)

# Word count above which a request counts as complex
COMPLEX_WORD_COUNT = 10
# Word count above which a request needs the large-context model
LARGE_CONTEXT_WORD_COUNT = 100

# Model router keyword sets (substring matches on the lowered request)
REASONING_KEYWORDS = (
    "analyze",
    "complex",
    "reasoning",
    "logic",
    "problem",
    "solve",
    "architecture",
    "design pattern",
    "optimization",
    "algorithm",
    "debug",
    "troubleshoot",
    "investigate",
    "research",
)

SPEED_KEYWORDS = (
    "quick",
    "fast",
    "immediately",
    "instant",
    "urgent",
    "now",
    "simple",
    "basic",
    "straightforward",
    "brief",
)

CREATIVITY_KEYWORDS = (
    "create",
    "design",
    "generate",
    "invent",
    "innovative",
    "creative",
    "original",
    "unique",
    "artistic",
    "compose",
    "write",
    "story",
    "content",
    "documentation",
)

LARGE_CONTEXT_KEYWORDS = (
    "entire",
    "whole",
    "complete",
    "comprehensive",
    "detailed",
    "full analysis",
    "all files",
    "project wide",
    "codebase",
    "documentation",
    "review everything",
)

CODE_KEYWORDS = (
    "code",
    "function",
    "method",
    "class",
    "variable",
    "implement",
    "program",
    "script",
    "syntax",
    "compile",
    "refactor",
    "optimize code",
    "code review",
)

INTEGRATION_KEYWORDS = (
    "integrate",
    "connect",
    "api",
    "service",
    "system",
    "database",
    "external",
    "third party",
    "configuration",
    "deployment",
    "setup",
    "install",
)


def count_words(text: str) -> int:
    """Whitespace-separated word count; 0 for empty or blank text."""
    return len(text.split())


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def is_explanation_request(text: str) -> bool:
    return bool(EXPLANATION_PATTERN.search(text))


def is_code_request(text: str) -> bool:
    return bool(CODE_PATTERN.search(text))


def is_creative_request(text: str) -> bool:
    return bool(CREATIVE_PATTERN.search(text))


def is_tool_required_request(text: str) -> bool:
    return bool(TOOL_PATTERN.search(text))


def is_system_knowledge_request(text: str) -> bool:
    return bool(SYSTEM_KNOWLEDGE_PATTERN.search(text))


def is_conceptual_request(text: str) -> bool:
    return bool(CONCEPTUAL_PATTERN.search(text))


def is_high_precision_request(text: str) -> bool:
    return bool(HIGH_PRECISION_PATTERN.search(text))


def is_complex_request(text: str) -> bool:
    """Complexity keyword present, or more than ten words."""
    return count_words(text) > COMPLEX_WORD_COUNT or bool(COMPLEX_PATTERN.search(text))


def needs_complex_reasoning(text: str) -> bool:
    return _contains_any(text, REASONING_KEYWORDS)


def needs_speed(text: str) -> bool:
    return _contains_any(text, SPEED_KEYWORDS)


def needs_creativity(text: str) -> bool:
    return _contains_any(text, CREATIVITY_KEYWORDS)


def needs_large_context(text: str) -> bool:
    return count_words(text) > LARGE_CONTEXT_WORD_COUNT or _contains_any(
        text, LARGE_CONTEXT_KEYWORDS
    )


def needs_code_specialist(text: str) -> bool:
    return _contains_any(text, CODE_KEYWORDS)


def needs_integration(text: str) -> bool:
    return _contains_any(text, INTEGRATION_KEYWORDS)


def complexity_score(text: str) -> float:
    """
    Numeric complexity in [0, 1].

    ``min(words / 20 + 0.3 * keyword_hits, 1.0)`` where keyword hits count
    every occurrence of complex/advanced/detailed/comprehensive/sophisticated.
    """
    words = count_words(text)
    if words == 0:
        return 0.0
    keyword_hits = len(COMPLEXITY_KEYWORD_PATTERN.findall(text))
    return min(words / 20 + keyword_hits * 0.3, 1.0)


def extract_request_signals(text: str) -> RequestSignals:
    """
    Extract every intent signal from a request.

    Deterministic and side-effect free; empty text yields all-false and zero.
    """
    return RequestSignals(
        explanation_intent=is_explanation_request(text),
        code_intent=is_code_request(text),
        creative_intent=is_creative_request(text),
        tool_required_intent=is_tool_required_request(text),
        system_knowledge_intent=is_system_knowledge_request(text),
        conceptual_intent=is_conceptual_request(text),
        high_precision_intent=is_high_precision_request(text),
        complex_intent=is_complex_request(text),
        needs_complex_reasoning=needs_complex_reasoning(text),
        needs_speed=needs_speed(text),
        needs_creativity=needs_creativity(text),
        needs_large_context=needs_large_context(text),
        needs_code_specialist=needs_code_specialist(text),
        needs_integration=needs_integration(text),
        word_count=count_words(text),
        complexity_score=complexity_score(text),
    )


__all__ = [
    "complexity_score",
    "count_words",
    "extract_request_signals",
    "is_code_request",
    "is_complex_request",
    "is_conceptual_request",
    "is_creative_request",
    "is_explanation_request",
    "is_high_precision_request",
    "is_system_knowledge_request",
    "is_tool_required_request",
    "needs_code_specialist",
    "needs_complex_reasoning",
    "needs_creativity",
    "needs_integration",
    "needs_large_context",
    "needs_speed",
]
