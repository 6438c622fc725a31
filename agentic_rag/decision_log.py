"""
JSONL logging of retrieval decisions.

Every executed decision can be appended to a JSONL file for offline
analysis of routing behavior. Logging is opt-in and never interferes
with request processing.

Usage:
    from agentic_rag.decision_log import DecisionLogConfig, DecisionLogger

    decision_logger = DecisionLogger(DecisionLogConfig(log_path="~/.agentic-rag/d.jsonl"))
    orchestrator = AgenticRAGOrchestrator(backend, decision_logger=decision_logger)
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .decisions import Decision

logger = logging.getLogger(__name__)


@dataclass
class DecisionLogRecord:
    """One logged decision, flattened for JSON."""

    request_id: str
    user_id: str
    decision_id: str
    decision_type: str
    reasoning: str
    confidence_score: float
    selected_models: list[str]
    success: bool | None
    execution_time_ms: float | None
    error: str | None = None
    models_optimized: list[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DecisionLogRecord:
        return cls(**data)

    @classmethod
    def from_decision(
        cls,
        decision: Decision,
        request_id: str,
        user_id: str,
        models_optimized: list[str] | None = None,
    ) -> DecisionLogRecord:
        return cls(
            request_id=request_id,
            user_id=user_id,
            decision_id=decision.decision_id,
            decision_type=decision.decision_type.value,
            reasoning=decision.reasoning,
            confidence_score=decision.confidence_score,
            selected_models=list(decision.selected_models),
            success=decision.success,
            execution_time_ms=decision.execution_time_ms,
            error=decision.error,
            models_optimized=list(models_optimized or []),
        )


@dataclass
class DecisionLogConfig:
    """Configuration for the decision logger."""

    # Log file path (supports ~ expansion)
    log_path: str = "~/.agentic-rag/decisions.jsonl"

    enabled: bool = True

    # Rotate once the file reaches this size
    max_size_mb: float = 50.0

    # Rotated files to keep (decisions.jsonl.1 .. decisions.jsonl.N)
    max_files: int = 5


class DecisionLogger:
    """
    Appends decision records to a rotating JSONL file.

    Write failures are logged as warnings and otherwise ignored.
    """

    def __init__(self, config: DecisionLogConfig | None = None):
        self.config = config or DecisionLogConfig()
        self._log_path: Path | None = None
        self._records_written = 0
        self._rotations = 0

        if self.config.enabled:
            path = Path(self.config.log_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            self._log_path = path

    @property
    def log_path(self) -> Path | None:
        return self._log_path

    @staticmethod
    def _rotated_path(path: Path, index: int) -> Path:
        return path.with_name(f"{path.name}.{index}")

    def _maybe_rotate(self) -> None:
        path = self._log_path
        if path is None or not path.exists():
            return
        size_mb = path.stat().st_size / (1024 * 1024)
        if size_mb < self.config.max_size_mb:
            return

        oldest = self._rotated_path(path, self.config.max_files)
        if oldest.exists():
            oldest.unlink()
        for i in range(self.config.max_files - 1, 0, -1):
            src = self._rotated_path(path, i)
            if src.exists():
                src.rename(self._rotated_path(path, i + 1))
        path.rename(self._rotated_path(path, 1))
        self._rotations += 1

        logger.info(f"Rotated decision log: {path}")

    def log_decisions(
        self,
        decisions: list[Decision],
        request_id: str,
        user_id: str,
        models_optimized: list[str] | None = None,
    ) -> int:
        """
        Log every decision of one request.

        Returns:
            Number of records written
        """
        if not self.config.enabled or self._log_path is None:
            return 0

        try:
            self._maybe_rotate()
            with open(self._log_path, "a") as f:
                for decision in decisions:
                    record = DecisionLogRecord.from_decision(
                        decision, request_id, user_id, models_optimized
                    )
                    f.write(json.dumps(record.to_dict()) + "\n")
            self._records_written += len(decisions)
            return len(decisions)
        except OSError as e:
            logger.warning(f"Failed to log decisions for {request_id}: {e}")
            return 0

    def read_records(self) -> list[DecisionLogRecord]:
        """Load records from the current log file, skipping malformed lines."""
        records: list[DecisionLogRecord] = []
        if self._log_path is None or not self._log_path.exists():
            return records

        with open(self._log_path) as f:
            for line in f:
                try:
                    records.append(DecisionLogRecord.from_dict(json.loads(line)))
                except (json.JSONDecodeError, TypeError) as e:
                    logger.warning(f"Skipping malformed line: {e}")
        return records

    def get_statistics(self) -> dict[str, Any]:
        """Get logging statistics."""
        stats: dict[str, Any] = {
            "enabled": self.config.enabled,
            "log_path": str(self._log_path) if self._log_path else None,
            "records_written": self._records_written,
            "rotations": self._rotations,
        }

        if self._log_path and self._log_path.exists():
            stats["log_size_mb"] = self._log_path.stat().st_size / (1024 * 1024)
            by_type: dict[str, int] = {}
            for record in self.read_records():
                by_type[record.decision_type] = by_type.get(record.decision_type, 0) + 1
            stats["by_decision_type"] = by_type

        return stats


__all__ = [
    "DecisionLogConfig",
    "DecisionLogRecord",
    "DecisionLogger",
]
