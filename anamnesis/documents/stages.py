"""
Linear stage runner for document generation.

Stages run in the order they were added; each receives the accumulated
context and returns a dict merged back into it. Unlike a batch pipeline there
is no partial success: the first failing stage is marked FAILED, the rest
SKIPPED, and the original exception propagates to the caller unchanged.

A StagePipeline records per-call status, so build one per document.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class StageStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class Stage:
    name: str
    execute_fn: Callable[[dict[str, Any]], dict[str, Any] | None]
    status: StageStatus = StageStatus.PENDING
    error: str | None = None
    duration_ms: float = 0.0


@dataclass
class StagePipeline:
    name: str
    stages: list[Stage] = field(default_factory=list)

    def add_stage(
        self, name: str, execute_fn: Callable[[dict[str, Any]], dict[str, Any] | None]
    ) -> StagePipeline:
        if any(stage.name == name for stage in self.stages):
            raise ValueError(f"Duplicate stage name: {name}")
        self.stages.append(Stage(name=name, execute_fn=execute_fn))
        return self

    def run(self, initial_context: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run every stage and return the final context."""
        context = dict(initial_context or {})
        logger.debug("Starting pipeline '%s' with %d stages", self.name, len(self.stages))

        for index, stage in enumerate(self.stages):
            stage.status = StageStatus.RUNNING
            start = time.perf_counter()
            try:
                context.update(stage.execute_fn(context) or {})
                stage.status = StageStatus.SUCCESS
            except Exception as exc:
                stage.status = StageStatus.FAILED
                stage.error = f"{type(exc).__name__}: {exc}"
                for later in self.stages[index + 1:]:
                    later.status = StageStatus.SKIPPED
                logger.error("Stage '%s' of '%s' failed: %s", stage.name, self.name, stage.error)
                raise
            finally:
                stage.duration_ms = (time.perf_counter() - start) * 1000

        logger.debug("Pipeline '%s' finished: %s", self.name, self.summary())
        return context

    def summary(self) -> dict[str, Any]:
        return {
            stage.name: {
                "status": stage.status.value,
                "duration_ms": round(stage.duration_ms, 2),
                "error": stage.error,
            }
            for stage in self.stages
        }

    @property
    def succeeded(self) -> bool:
        return all(stage.status == StageStatus.SUCCESS for stage in self.stages)
