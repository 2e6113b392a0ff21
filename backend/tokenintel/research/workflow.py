"""
Sequential research workflow driver with streamed progress
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..models import ResearchStatus, ResearchStep
from ..utils.errors import ResearchCancelled
from ..utils.metrics import research_duration
from .session import ResearchSession
from .sinks import ProgressSink

logger = logging.getLogger(__name__)

StepOperation = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass
class PlannedStep:
    """
    One step of a research plan. ``operation`` receives the results of the
    steps completed so far; a step with ``skip_message`` is skipped.
    """
    id: str
    title: str
    description: str
    operation: Optional[StepOperation] = None
    skip_message: Optional[str] = None


@dataclass
class ResearchPlan:
    mint: str
    steps: List[PlannedStep] = field(default_factory=list)
    summarize: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None

    def new_session(self) -> ResearchSession:
        return ResearchSession(
            ResearchStep(id=step.id, title=step.title, description=step.description)
            for step in self.steps
        )


class ResearchWorkflow:
    def __init__(self, session: ResearchSession, sink: ProgressSink, cancel_event: Optional[asyncio.Event] = None):
        self.session = session
        self.sink = sink
        self.cancel_event = cancel_event

    def _emit(self, message: Dict[str, Any]) -> None:
        self.sink.send(message)

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ResearchCancelled("Research cancelled by client")

    async def execute_step(self, step_id: str, operation: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run one step: emit processing, then completed with the result or
        failed with the error message. Failures are re-raised.
        """
        self._emit(self.session.transition(step_id, ResearchStatus.PROCESSING, f"Processing {step_id}..."))
        try:
            result = await operation()
        except Exception as e:
            logger.warning(f"Research step {step_id} failed: {str(e)}")
            self._emit(self.session.transition(step_id, ResearchStatus.FAILED, f"Failed: {str(e)}"))
            raise
        self._emit(self.session.transition(step_id, ResearchStatus.COMPLETED, f"Completed {step_id}", result))
        return result

    def skip_step(self, step_id: str, message: str) -> None:
        self._emit(self.session.transition(step_id, ResearchStatus.SKIPPED, message))

    async def run(self, plan: ResearchPlan) -> Dict[str, Any]:
        """
        Walk the plan in order. Any failure stops the walk and yields a
        partial result holding the steps completed so far.
        """
        start_time = time.time()
        self._emit(self.session.snapshot(current_step=None))
        results: Dict[str, Any] = {}

        try:
            for step in plan.steps:
                self._check_cancelled()
                if step.skip_message is not None:
                    self.skip_step(step.id, step.skip_message)
                    continue
                results[step.id] = await self.execute_step(
                    step.id, lambda step=step: step.operation(results)
                )
        except Exception as e:
            logger.info(f"Research for {plan.mint} ended early: {str(e)}")
            research_duration.labels(finish_reason='partial').observe(time.time() - start_time)
            return {
                "finish_reason": "partial",
                "error": str(e),
                "data": self.session.completed_results(),
            }

        summary = plan.summarize(results) if plan.summarize else {"mintAddress": plan.mint}
        self._emit(self.session.snapshot(
            current_step=None,
            overallProgress=100,
            completed=True,
            summary=summary,
        ))
        research_duration.labels(finish_reason='completed').observe(time.time() - start_time)
        return {"finish_reason": "completed", "data": results, "summary": summary}
