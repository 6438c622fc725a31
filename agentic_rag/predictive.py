"""
Predictive context preparation.

Guesses what a user is likely to ask next and caches those predictions
per user and request, so follow-up requests can reuse them.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any

from . import request_classifier as rc
from .config import PredictionConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prediction:
    """A likely follow-up need."""

    type: str
    probability: float
    context_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "probability": self.probability,
            "context_type": self.context_type,
        }


@dataclass
class CachedPrediction:
    """A cache entry holding the predictions for one request."""

    predictions: list[Prediction]
    timestamp: float = field(default_factory=time.time)
    ttl_seconds: int = 3600

    def is_expired(self, now: float | None = None) -> bool:
        now = time.time() if now is None else now
        return now - self.timestamp >= self.ttl_seconds


def hash_request(text: str) -> str:
    """
    Stable 32-bit rolling hash of a request, as a signed decimal string.

    ``h = h * 31 + unit`` over the UTF-16 code units of the text, wrapped
    to 32 bits. Characters outside the BMP contribute two surrogate units.
    """
    data = text.encode("utf-16-le", errors="surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return str(h)


def cache_key(request: str, user_id: str) -> str:
    return f"predicted_{user_id}_{hash_request(request)}"


class PredictiveContextEngine:
    """
    Predicts follow-up context needs and caches them.

    TTLs are stored on every entry but lookups do not check them; call
    ``sweep_expired`` to drop stale entries. The cache is bounded by
    ``max_entries`` and evicts the oldest entry first.
    """

    def __init__(self, config: PredictionConfig | None = None):
        self.config = config or PredictionConfig()
        self._cache: OrderedDict[str, CachedPrediction] = OrderedDict()
        self._stats = {
            "predictions_made": 0,
            "cache_hits": 0,
            "cache_misses": 0,
            "entries_evicted": 0,
            "entries_expired": 0,
        }

    def predict(self, request: str) -> list[Prediction]:
        """Predictions for a request, without touching the cache."""
        predictions = []
        if rc.is_explanation_request(request):
            predictions.append(Prediction("detailed_explanation", 0.8, "expanded_details"))
        if rc.is_code_request(request):
            predictions.append(Prediction("example", 0.7, "code_examples"))
            predictions.append(Prediction("modify", 0.6, "modification_patterns"))
        return predictions

    async def predict_next_context_needs(self, request: str, user_id: str) -> list[Prediction]:
        """Predict follow-up needs and cache them under the request's key."""
        predictions = self.predict(request)
        key = cache_key(request, user_id)

        self._cache.pop(key, None)
        self._cache[key] = CachedPrediction(
            predictions=predictions, ttl_seconds=self.config.ttl_seconds
        )
        self._stats["predictions_made"] += 1

        while len(self._cache) > self.config.max_entries:
            self._cache.popitem(last=False)
            self._stats["entries_evicted"] += 1

        logger.info(f"Prepared {len(predictions)} predictive contexts for user {user_id}")
        return predictions

    def get_cached(self, request: str, user_id: str) -> CachedPrediction | None:
        """Look up cached predictions; TTL is not enforced here."""
        entry = self._cache.get(cache_key(request, user_id))
        if entry is None:
            self._stats["cache_misses"] += 1
            return None
        self._stats["cache_hits"] += 1
        return entry

    def sweep_expired(self, now: float | None = None) -> int:
        """Remove entries older than their TTL. Returns the number removed."""
        expired = [key for key, entry in self._cache.items() if entry.is_expired(now)]
        for key in expired:
            del self._cache[key]
        self._stats["entries_expired"] += len(expired)
        return len(expired)

    @property
    def cache_hits(self) -> int:
        return self._stats["cache_hits"]

    def __len__(self) -> int:
        return len(self._cache)

    def get_statistics(self) -> dict[str, Any]:
        """Get cache statistics."""
        total_lookups = self._stats["cache_hits"] + self._stats["cache_misses"]
        return {
            **self._stats,
            "total_entries": len(self._cache),
            "hit_rate": self._stats["cache_hits"] / total_lookups if total_lookups > 0 else 0.0,
        }

    def clear(self) -> None:
        """Clear all cache entries."""
        self._cache.clear()


__all__ = [
    "CachedPrediction",
    "Prediction",
    "PredictiveContextEngine",
    "cache_key",
    "hash_request",
]
