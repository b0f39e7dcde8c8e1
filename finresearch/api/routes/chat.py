"""
Chat Endpoint - Streams an agent run as Server-Sent Events.

Each progress event becomes one SSE frame:

    event: <kind>
    data: <json payload>

The stream ends after `run-complete` or `error`. If the client goes away
the run is cancelled at its next suspension point.
"""

import asyncio
import json
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from finresearch.agents.base import CancellationToken
from finresearch.agents.events import (
    AgentEvent,
    CompositeObserver,
    LoggingObserver,
    QueueObserver,
)
from finresearch.agents.history import MessageHistory
from finresearch.agents.orchestrator import Agent
from finresearch.core.dependencies import AgentFactory, get_agent_factory
from finresearch.models.requests import ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


RUN_SHUTDOWN_TIMEOUT = 5.0


def format_sse(event: AgentEvent) -> str:
    """Encode one event as an SSE frame."""
    data = json.dumps(event.payload, default=str)
    return f"event: {event.kind.value}\ndata: {data}\n\n"


async def stream_run(
    agent: Agent,
    queue_observer: QueueObserver,
    query: str,
    history: MessageHistory,
    token: CancellationToken
) -> AsyncIterator[str]:
    """
    Run the agent in the background and yield its events as SSE frames.

    Stops after the terminal event. If the consumer stops early (client
    disconnect), the run is cancelled and given RUN_SHUTDOWN_TIMEOUT
    seconds to reach its terminal event before it is torn down.
    """
    run = asyncio.create_task(agent.run(query, history, token))
    try:
        while True:
            event = await queue_observer.get()
            yield format_sse(event)
            if event.is_terminal:
                break
        await run
    finally:
        if not run.done():
            logger.info("Client disconnected, cancelling run")
            token.cancel()
            try:
                await asyncio.wait_for(run, timeout=RUN_SHUTDOWN_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning(f"Run still busy {RUN_SHUTDOWN_TIMEOUT}s after disconnect, aborted")


@router.post(
    "/chat",
    summary="Research Query",
    description="Run the research agent and stream its progress and answer as SSE",
    response_class=StreamingResponse,
)
async def chat(
    request: ChatRequest,
    agent_factory: AgentFactory = Depends(get_agent_factory)
) -> StreamingResponse:
    """
    Answer a research query.

    Args:
        request: Query plus prior conversation

    Returns:
        text/event-stream of progress events
    """
    queue_observer = QueueObserver()
    agent = agent_factory(CompositeObserver([queue_observer, LoggingObserver()]))
    history = MessageHistory.from_messages(request.message_history)
    token = CancellationToken()

    return StreamingResponse(
        stream_run(agent, queue_observer, request.query, history, token),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
