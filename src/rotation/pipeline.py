"""
Step pipeline for the daily rotation jobs.

A job is a list of named steps sharing a context dict. Each step returns a
dict of values merged into the context (or None). The pipeline stops at the
first failing step and reports which step it was.

Usage:
    pipeline = Pipeline("stage", [
        ("pick_song", pick_song),
        ("upsert_next", upsert_next),
    ])
    result = pipeline.run()
    if not result.success:
        print(result.failed_step, result.error)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from django.db import DatabaseError
from pydantic import BaseModel

from .exceptions import PersistenceError, RotationError

logger = logging.getLogger(__name__)

Step = Callable[[dict[str, Any]], dict[str, Any] | None]


class StepResult(BaseModel):
    """Outcome of a single pipeline step."""

    step: str
    success: bool
    data: dict[str, Any] = {}
    error: str | None = None


@dataclass
class PipelineResult:
    """Outcome of a whole pipeline run."""

    name: str
    steps: list[StepResult] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    error: RotationError | None = None
    failed_step: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def step_summaries(self) -> list[dict]:
        return [step.model_dump() for step in self.steps]


class Pipeline:
    """Run named steps in order, stopping at the first failure."""

    def __init__(self, name: str, steps: list[tuple[str, Step]]):
        self.name = name
        self.steps = steps

    def run(self, context: dict[str, Any] | None = None) -> PipelineResult:
        result = PipelineResult(name=self.name, context=dict(context or {}))

        for step_name, step in self.steps:
            logger.info(f"[{self.name}] {step_name}")
            try:
                updates = step(result.context) or {}
            except RotationError as e:
                error = e
            except DatabaseError as e:
                error = PersistenceError(f"{step_name}: {e}")
            except Exception as e:
                logger.exception(f"[{self.name}] Unexpected error in {step_name}: {e}")
                error = RotationError(f"{step_name}: {e}")
            else:
                result.context.update(updates)
                result.steps.append(StepResult(
                    step=step_name,
                    success=True,
                    data=_public(updates),
                ))
                continue

            logger.error(f"[{self.name}] {step_name} failed: {error.message}")
            result.steps.append(StepResult(step=step_name, success=False, error=error.message))
            result.error = error
            result.failed_step = step_name
            break

        return result


def _public(updates: dict[str, Any]) -> dict[str, Any]:
    """Keep only JSON-friendly scalars for the step summary."""
    return {
        key: value
        for key, value in updates.items()
        if not key.startswith("_") and isinstance(value, (str, int, float, bool, type(None)))
    }
