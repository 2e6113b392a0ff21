"""
Research step state machine and progress snapshots
"""

import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..models import ResearchStatus, ResearchStep
from ..utils.errors import InvalidTransition
from ..utils.metrics import research_steps

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    ResearchStatus.WAITING: {ResearchStatus.PROCESSING, ResearchStatus.SKIPPED},
    ResearchStatus.PROCESSING: {ResearchStatus.COMPLETED, ResearchStatus.FAILED},
    ResearchStatus.COMPLETED: set(),
    ResearchStatus.SKIPPED: set(),
    ResearchStatus.FAILED: set(),
}


class ResearchSession:
    """Owns the ordered research steps; every change returns a snapshot message."""

    def __init__(self, steps: Iterable[ResearchStep]):
        self.steps: List[ResearchStep] = list(steps)
        self._by_id: Dict[str, ResearchStep] = {step.id: step for step in self.steps}
        if len(self._by_id) != len(self.steps):
            raise ValueError("Research step ids must be unique")

    def get(self, step_id: str) -> ResearchStep:
        try:
            return self._by_id[step_id]
        except KeyError:
            raise InvalidTransition(f"Unknown research step: {step_id}") from None

    @property
    def overall_progress(self) -> int:
        if not self.steps:
            return 100
        done = sum(
            1 for step in self.steps
            if step.status in (ResearchStatus.COMPLETED, ResearchStatus.SKIPPED)
        )
        return round(100 * done / len(self.steps))

    def snapshot(self, current_step: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
        """Deep-copied progress message, safe to hand to another task."""
        message = {
            "type": "research_progress",
            "steps": [step.to_dict() for step in self.steps],
            "currentStep": current_step,
            "overallProgress": self.overall_progress,
        }
        message.update(extra)
        return copy.deepcopy(message)

    def transition(
        self,
        step_id: str,
        status: ResearchStatus,
        message: Optional[str] = None,
        result: Any = None,
    ) -> Dict[str, Any]:
        """
        Move a step to ``status`` and return the resulting snapshot.

        Raises:
            InvalidTransition: for an unknown step or a move the state machine forbids
        """
        step = self.get(step_id)
        status = ResearchStatus(status)
        if status not in ALLOWED_TRANSITIONS[step.status]:
            raise InvalidTransition(
                f"Cannot move step {step_id} from {step.status.value} to {status.value}"
            )

        step.status = status
        step.message = message
        step.result = result
        step.timestamp = datetime.now(timezone.utc).isoformat()

        research_steps.labels(step=step_id, status=status.value).inc()
        logger.debug(f"Research step {step_id} -> {status.value}")
        return self.snapshot(current_step=step_id)

    def completed_results(self) -> Dict[str, Any]:
        return {
            step.id: step.result
            for step in self.steps
            if step.status == ResearchStatus.COMPLETED
        }
