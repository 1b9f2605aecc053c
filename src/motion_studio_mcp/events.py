"""Generation stream events — consumed, never produced, by the renderer.

The storyboard service streams ``data: {json}`` records separated by a
blank line. Each record is a progress update, the final storyboard, or an
error message.
"""

from __future__ import annotations

import asyncio
import codecs
import json
import logging
import uuid
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable, Iterator
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError, field_validator

from .errors import GenerationError
from .models.storyboard import VideoResult, parse_video_result

logger = logging.getLogger(__name__)

_DATA_PREFIX = "data: "
_RECORD_SEPARATOR = "\n\n"


class LoadingState(BaseModel):
    """Progress of a generation run."""

    step: int = Field(ge=0)
    total_steps: int = Field(ge=0, validation_alias=AliasChoices("total_steps", "totalSteps"))
    message: str = ""


class ProgressEvent(BaseModel):
    type: Literal["progress"] = "progress"
    data: LoadingState


class ResultEvent(BaseModel):
    type: Literal["result"] = "result"
    data: VideoResult

    @field_validator("data", mode="before")
    @classmethod
    def parse_storyboard(cls, value: Any) -> VideoResult:
        return parse_video_result(value)


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    data: str

    @field_validator("data", mode="before")
    @classmethod
    def stringify(cls, value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, dict) and isinstance(value.get("error"), str):
            return value["error"]
        return json.dumps(value)


GenerationEvent = Annotated[
    Union[ProgressEvent, ResultEvent, ErrorEvent],
    Field(discriminator="type"),
]
_event_adapter: TypeAdapter = TypeAdapter(GenerationEvent)


def parse_event(payload: dict | str) -> ProgressEvent | ResultEvent | ErrorEvent | None:
    """Validate one event payload; ``None`` (with a warning) if unusable."""
    try:
        if isinstance(payload, str):
            payload = json.loads(payload)
        return _event_adapter.validate_python(payload)
    except json.JSONDecodeError as exc:
        logger.warning("Skipping unparseable stream record: %s", exc.msg)
    except ValidationError as exc:
        logger.warning("Skipping invalid stream event: %s", exc.errors()[0]["msg"])
    return None


def _parse_record(record: str) -> Iterator[ProgressEvent | ResultEvent | ErrorEvent]:
    for line in record.splitlines():
        if not line.startswith(_DATA_PREFIX):
            continue
        event = parse_event(line[len(_DATA_PREFIX):])
        if event is not None:
            yield event


def iter_stream_events(
    chunks: Iterable[str | bytes],
) -> Iterator[ProgressEvent | ResultEvent | ErrorEvent]:
    """Split a chunked event stream into typed events.

    Chunks may cut records (and UTF-8 sequences) anywhere.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""
    for chunk in chunks:
        buffer += decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        *records, buffer = buffer.split(_RECORD_SEPARATOR)
        for record in records:
            yield from _parse_record(record)
    buffer += decoder.decode(b"", final=True)
    if buffer.strip():
        yield from _parse_record(buffer)


async def aiter_stream_events(
    chunks: AsyncIterable[str | bytes],
) -> AsyncIterator[ProgressEvent | ResultEvent | ErrorEvent]:
    """Async counterpart of :func:`iter_stream_events`."""
    decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""
    async for chunk in chunks:
        buffer += decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        *records, buffer = buffer.split(_RECORD_SEPARATOR)
        for record in records:
            for event in _parse_record(record):
                yield event
    buffer += decoder.decode(b"", final=True)
    if buffer.strip():
        for event in _parse_record(buffer):
            yield event


def collect_result(
    events: Iterable[ProgressEvent | ResultEvent | ErrorEvent],
    on_progress: Callable[[LoadingState], None] | None = None,
) -> VideoResult:
    """Consume events until the storyboard arrives.

    Raises:
        GenerationError: On an error event, or if the stream ends first.
    """
    for event in events:
        if isinstance(event, ProgressEvent):
            if on_progress is not None:
                on_progress(event.data)
        elif isinstance(event, ResultEvent):
            return event.data
        else:
            raise GenerationError(event.data)
    raise GenerationError("Generation stream ended without a result")


class RequestCorrelator:
    """Matches responses to in-flight requests by id.

    Owned by the caller; each instance tracks only its own requests.
    """

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Future] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def register(self) -> tuple[str, asyncio.Future]:
        """Open a request; must be called from a running event loop."""
        request_id = uuid.uuid4().hex
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        return request_id, future

    def resolve(self, request_id: str, payload: Any) -> bool:
        """Deliver a response; False if the id is unknown or already settled."""
        future = self._pending.pop(request_id, None)
        if future is None or future.done():
            logger.warning("Response for unknown request %s ignored", request_id)
            return False
        future.set_result(payload)
        return True

    def reject(self, request_id: str, reason: str) -> bool:
        """Fail a request with a :class:`GenerationError`."""
        future = self._pending.pop(request_id, None)
        if future is None or future.done():
            logger.warning("Error for unknown request %s ignored: %s", request_id, reason)
            return False
        future.set_exception(GenerationError(reason))
        return True

    async def wait(self, request_id: str, future: asyncio.Future, timeout: float) -> Any:
        """Await a response, dropping the request if it times out."""
        try:
            return await asyncio.wait_for(future, timeout)
        finally:
            self._pending.pop(request_id, None)

    def cancel_all(self) -> int:
        """Cancel every in-flight request; returns how many were cancelled."""
        cancelled = 0
        for future in self._pending.values():
            if not future.done():
                future.cancel()
                cancelled += 1
        self._pending.clear()
        return cancelled
