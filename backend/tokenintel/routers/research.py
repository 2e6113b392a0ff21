"""
Research Router - streamed multi-step token research
"""
import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from solders.pubkey import Pubkey

from ..dependencies.services import (
    get_connection_provider,
    get_executor,
    get_http_client,
    get_price_feed,
    get_pump_api,
    get_social_aggregator,
)
from ..pumpfun.api import PumpFunAPI
from ..pumpfun.market import SolPriceFeed
from ..research import (
    QueueProgressSink,
    ResearchServices,
    ResearchWorkflow,
    build_token_research_plan,
)
from ..social.signals import SocialSignalAggregator
from ..utils.connection_provider import ConnectionProvider
from ..utils.errors import TokenIntelError
from ..utils.fallback import FallbackExecutor
from .onchain import valid_mint

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Research"])


def _line(message: Dict[str, Any]) -> str:
    return json.dumps(message, default=str) + "\n"


async def run_research(
    mint: str,
    provider: ConnectionProvider,
    services: Dict[str, Any],
    sink: QueueProgressSink,
    cancel_event: asyncio.Event,
) -> Dict[str, Any]:
    """Connect, run the research plan into ``sink`` and close the sink."""
    try:
        try:
            connection = await provider.connect()
        except TokenIntelError as e:
            return {"finish_reason": "partial", "error": str(e), "data": {}}

        try:
            plan = build_token_research_plan(mint, ResearchServices(connection=connection, **services))
            workflow = ResearchWorkflow(plan.new_session(), sink, cancel_event)
            return await workflow.run(plan)
        finally:
            await ConnectionProvider.close_client(connection)
    finally:
        sink.close()


def _log_task_failure(task: "asyncio.Task[Dict[str, Any]]") -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Research task failed: {str(error)}", exc_info=error)


@router.post("/{ca}")
async def research_token(
    mint: Pubkey = Depends(valid_mint),
    provider: ConnectionProvider = Depends(get_connection_provider),
    pump_api: PumpFunAPI = Depends(get_pump_api),
    price_feed: SolPriceFeed = Depends(get_price_feed),
    social: SocialSignalAggregator = Depends(get_social_aggregator),
    executor: FallbackExecutor = Depends(get_executor),
    http_client=Depends(get_http_client),
) -> StreamingResponse:
    """
    Stream research progress as newline-delimited JSON, one
    ``research_progress`` message per line, ending with a
    ``research_result`` line.
    """
    services = {
        "pump_api": pump_api,
        "price_feed": price_feed,
        "social": social,
        "executor": executor,
        "http_client": http_client,
    }

    async def stream() -> AsyncIterator[str]:
        sink = QueueProgressSink()
        cancel_event = asyncio.Event()
        task = asyncio.create_task(run_research(str(mint), provider, services, sink, cancel_event))
        task.add_done_callback(_log_task_failure)
        try:
            async for message in sink:
                yield _line(message)
            result = await task
            yield _line({"type": "research_result", **result})
        finally:
            if not task.done():
                logger.info(f"Client left during research for {mint}, cancelling")
                cancel_event.set()

    return StreamingResponse(stream(), media_type="application/x-ndjson")
