"""Recommendation endpoints: one terminal result, or an NDJSON progress stream."""

import asyncio
import json
import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from reco.models.messages import RecoRequest, ResultMessage
from reco.providers import attach_embeddings

from ..state import get_state

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_line(message) -> str:
    return json.dumps(message.model_dump(by_alias=True, mode="json")) + "\n"


async def _with_embeddings(request: RecoRequest) -> RecoRequest:
    """Fill missing embeddings off the event loop (providers may do blocking I/O)."""
    state = get_state()
    if state.embedding_provider is None:
        return request
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, attach_embeddings, request, state.embedding_provider)


@router.post("", response_model=ResultMessage)
async def recommend(request: RecoRequest):
    """Run the pipeline and return the terminal result message."""
    state = get_state()
    request = await _with_embeddings(request)
    result = await asyncio.wrap_future(state.worker.submit(request))
    state.record_result(failed=result.error is not None)
    logger.info(
        "[recommendations] shelves=%d compute_time_ms=%d error=%s",
        len(result.shelves), result.compute_time_ms, result.error,
    )
    return result


@router.post("/stream")
async def recommend_stream(request: RecoRequest):
    """
    Run the pipeline and stream newline-delimited JSON messages.

    Zero or more progress messages are followed by exactly one result message. Runs share
    the app worker with POST /api/recommendations: once a newer request is submitted,
    this stream gets no further progress but still ends with its own result.
    """
    state = get_state()
    request = await _with_embeddings(request)
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def publish(message) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, message)

    def on_progress(message) -> None:
        if message.type == "progress":
            publish(message)

    def on_done(future) -> None:
        result = future.result()
        state.record_result(failed=result.error is not None)
        publish(result)

    future = state.worker.submit(request, listener=on_progress)
    future.add_done_callback(on_done)

    async def messages():
        while True:
            message = await queue.get()
            yield _to_line(message)
            if message.type == "result":
                break

    return StreamingResponse(messages(), media_type="application/x-ndjson")
