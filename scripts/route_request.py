#!/usr/bin/env python3
"""
Show how a request would be classified and routed.

Usage:
    python scripts/route_request.py "explain this complex algorithm in detail"
    echo "quickly fix this" | python scripts/route_request.py

Prints the classifier signals, the memory search strategy, the routed
model list and the orchestra strategy as JSON.
"""

import json
import logging
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from agentic_rag.config import AgenticRAGConfig  # noqa: E402
from agentic_rag.memory import decide_strategy  # noqa: E402
from agentic_rag.model_router import IntelligentModelRouter, orchestra_strategy  # noqa: E402
from agentic_rag.request_classifier import extract_request_signals  # noqa: E402


def route_request(prompt: str, max_models: int = 3) -> dict:
    """Classify and route a prompt without contacting any backend."""
    router = IntelligentModelRouter()
    models = router.select_models(prompt, max_models=max_models)
    return {
        "signals": extract_request_signals(prompt).model_dump(),
        "memory_strategy": decide_strategy(prompt).model_dump(),
        "models": models,
        "orchestra_strategy": orchestra_strategy(models),
    }


if __name__ == "__main__":
    # Logs go to stderr; stdout carries the JSON
    logging.basicConfig(
        level=AgenticRAGConfig.load().logging.level.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if len(sys.argv) > 1:
        prompt = " ".join(sys.argv[1:])
    else:
        prompt = sys.stdin.read()

    print(json.dumps(route_request(prompt.strip()), indent=2))
