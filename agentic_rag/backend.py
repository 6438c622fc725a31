"""
Message backends the orchestrator delegates final responses to.

Supports:
- In-process echo backend (tests, scripts)
- Anthropic (Claude) and OpenAI (GPT) via their async SDKs
"""

from __future__ import annotations

import os
import time
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import anthropic
import openai
from dotenv import load_dotenv

from .config import BackendConfig

# Auto-load .env from project root
_project_root = Path(__file__).parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


@dataclass
class BackendResponse:
    """Response from a message backend."""

    success: bool
    response: Any = None
    error: str | None = None
    model_used: str | None = None
    processing_time_ms: float = 0.0


@runtime_checkable
class MessageBackend(Protocol):
    """Anything that can answer an enhanced request and load memories."""

    async def send_message(
        self,
        text: str,
        *,
        enhanced_context: dict[str, Any],
        selected_models: list[str],
        agentic_mode: bool,
    ) -> BackendResponse: ...

    async def load_personal_memories(self, user_id: str) -> list[dict[str, Any]]: ...


@dataclass
class InMemoryBackend:
    """
    Echo backend with per-user memory storage.

    Every call is recorded in ``sent`` so tests can inspect what the
    orchestrator delegated.
    """

    memories: dict[str, list[dict[str, Any]]] = field(
        default_factory=lambda: defaultdict(list)
    )
    sent: list[dict[str, Any]] = field(default_factory=list)

    def add_memory(
        self, user_id: str, content: str, confidence: float = 0.5, **extra: Any
    ) -> dict[str, Any]:
        memory = {"user_id": user_id, "content": content, "confidence": confidence, **extra}
        self.memories[user_id].append(memory)
        return memory

    async def send_message(
        self,
        text: str,
        *,
        enhanced_context: dict[str, Any],
        selected_models: list[str],
        agentic_mode: bool,
    ) -> BackendResponse:
        self.sent.append(
            {
                "text": text,
                "enhanced_context": enhanced_context,
                "selected_models": list(selected_models),
                "agentic_mode": agentic_mode,
            }
        )
        model = selected_models[0] if selected_models else None
        return BackendResponse(
            success=True,
            response={"message": f"Echo: {text}", "models_used": list(selected_models)},
            model_used=model,
        )

    async def load_personal_memories(self, user_id: str) -> list[dict[str, Any]]:
        return list(self.memories.get(user_id, []))


SYSTEM_PROMPT = (
    "You are the final responder of a retrieval-augmented assistant. "
    "Answer the user's request using the supplied context where relevant."
)


def build_prompt(text: str, enhanced_context: dict[str, Any], selected_models: list[str]) -> str:
    """Render the request plus its enhanced context as a single user turn."""
    sections = [f"Request:\n{text}"]
    memories = enhanced_context.get("memories") or []
    if memories:
        lines = [f"- {m.get('content', m)}" for m in memories]
        sections.append("Relevant memories:\n" + "\n".join(lines))
    expanded = enhanced_context.get("expanded_context") or {}
    if expanded:
        sections.append(f"Expanded context: {expanded}")
    learned = enhanced_context.get("learned_patterns") or {}
    if learned:
        sections.append(f"Learned patterns: {learned}")
    if selected_models:
        sections.append(f"Specialists consulted: {', '.join(selected_models)}")
    return "\n\n".join(sections)


class LLMBackend:
    """
    Backend that answers through a hosted LLM.

    The provider comes from ``BackendConfig.provider``; API keys come from
    ``ANTHROPIC_API_KEY`` / ``OPENAI_API_KEY``. Provider errors are
    reported as ``BackendResponse(success=False)``, never raised.
    """

    def __init__(self, config: BackendConfig | None = None, api_key: str | None = None):
        self.config = config or BackendConfig()
        self._memories: dict[str, list[dict[str, Any]]] = defaultdict(list)

        if self.config.provider == "anthropic":
            key = api_key or os.environ.get("ANTHROPIC_API_KEY")
            if not key:
                raise ValueError(
                    "Anthropic API key required. Set ANTHROPIC_API_KEY environment variable."
                )
            self._anthropic = anthropic.AsyncAnthropic(api_key=key)
            self._openai = None
        elif self.config.provider == "openai":
            key = api_key or os.environ.get("OPENAI_API_KEY")
            if not key:
                raise ValueError(
                    "OpenAI API key required. Set OPENAI_API_KEY environment variable."
                )
            self._openai = openai.AsyncOpenAI(api_key=key)
            self._anthropic = None
        else:
            raise ValueError(f"Unknown provider: {self.config.provider}")

    def remember(self, user_id: str, content: str, confidence: float = 0.5) -> None:
        self._memories[user_id].append(
            {"user_id": user_id, "content": content, "confidence": confidence}
        )

    async def load_personal_memories(self, user_id: str) -> list[dict[str, Any]]:
        return list(self._memories.get(user_id, []))

    async def send_message(
        self,
        text: str,
        *,
        enhanced_context: dict[str, Any],
        selected_models: list[str],
        agentic_mode: bool,
    ) -> BackendResponse:
        prompt = build_prompt(text, enhanced_context, selected_models)
        start = time.time()
        try:
            content = await self._complete(prompt)
        except (anthropic.APIError, openai.APIError) as e:
            return BackendResponse(
                success=False,
                error=str(e),
                model_used=self.config.model,
                processing_time_ms=(time.time() - start) * 1000,
            )

        return BackendResponse(
            success=True,
            response={
                "message": content,
                "models_used": list(selected_models),
                "agentic_mode": agentic_mode,
            },
            model_used=self.config.model,
            processing_time_ms=(time.time() - start) * 1000,
        )

    async def _complete(self, prompt: str) -> str:
        messages = [{"role": "user", "content": prompt}]

        if self._anthropic is not None:
            response = await self._anthropic.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                system=SYSTEM_PROMPT,
                messages=messages,
            )
            content = ""
            for block in response.content:
                if block.type == "text":
                    content += block.text
            return content

        full_messages = [{"role": "system", "content": SYSTEM_PROMPT}, *messages]
        response = await self._openai.chat.completions.create(
            model=self.config.model,
            messages=full_messages,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )
        return response.choices[0].message.content or ""


__all__ = [
    "BackendResponse",
    "InMemoryBackend",
    "LLMBackend",
    "MessageBackend",
    "build_prompt",
]
