"""Isolated execution context for the cleaning scan.

The caller posts a ``START_CLEANING`` message and reads back ``PROGRESS``
messages followed by exactly one ``COMPLETE`` (or ``ERROR``) message.
Records cross the boundary as plain dictionaries, so the scan never holds a
reference to the caller's objects.
"""

from __future__ import annotations

import dataclasses
import logging
import multiprocessing
import queue
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, Iterator, Mapping, Optional, Sequence, Union

from ...config import settings
from ...models.domain import GeoRecord
from ...schemas.cleaning import (
    CleaningReport,
    CompleteMessage,
    ErrorMessage,
    StartCleaningMessage,
    WorkerMessage,
)
from ..progress import CancellationToken, OperationCancelled
from .scanner import run_cleaning_scan

CANCELLED_DETAIL = "cancelled"
_RECORD_FIELDS = tuple(field.name for field in dataclasses.fields(GeoRecord))

logger = logging.getLogger(__name__)


def record_to_payload(record: Union[GeoRecord, Mapping[str, Any]]) -> dict[str, Any]:
    if isinstance(record, GeoRecord):
        return dataclasses.asdict(record)
    return dict(record)


def record_from_payload(payload: Mapping[str, Any]) -> GeoRecord:
    values = {key: payload.get(key) for key in _RECORD_FIELDS if key in payload}
    values["id"] = str(values.get("id") or "")
    if not isinstance(values.get("name"), str):
        values["name"] = ""
    return GeoRecord(**values)


def clean_in_context(message: dict[str, Any], channel: Any, token: CancellationToken) -> None:
    """Entry point executed inside the worker thread or process."""

    try:
        start = StartCleaningMessage.model_validate(message)
        records = [record_from_payload(item) for item in start.data]
        report = run_cleaning_scan(records, channel.put, cancel_token=token)
    except OperationCancelled:
        logger.info("Cleaning scan cancelled")
        channel.put(ErrorMessage(detail=CANCELLED_DETAIL))
    except Exception as exc:
        logger.exception("Cleaning scan failed")
        channel.put(ErrorMessage(detail=str(exc)))
    else:
        channel.put(CompleteMessage(report=report))


class CleaningJob:
    """Handle on one submitted batch: a message stream plus cancellation."""

    def __init__(self, future: Future, channel: Any, token: CancellationToken) -> None:
        self._future = future
        self._channel = channel
        self._token = token
        self._final: Optional[WorkerMessage] = None
        future.add_done_callback(self._report_failure)

    def _report_failure(self, future: Future) -> None:
        # failures outside the scan itself, e.g. a payload the pool cannot pickle
        if future.cancelled():
            self._channel.put(ErrorMessage(detail=CANCELLED_DETAIL))
            return
        exc = future.exception()
        if exc is not None:
            logger.error(f"Cleaning worker failed before reporting: {exc}")
            self._channel.put(ErrorMessage(detail=str(exc)))

    def cancel(self) -> None:
        self._token.cancel()

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    @property
    def done(self) -> bool:
        return self._future.done()

    def messages(self, timeout: Optional[float] = None) -> Iterator[WorkerMessage]:
        """Yield messages in order until the terminal COMPLETE/ERROR message."""

        if self._final is not None:
            yield self._final
            return
        while True:
            try:
                message = self._channel.get(timeout=timeout)
            except queue.Empty as exc:
                raise TimeoutError("No message from cleaning worker within timeout") from exc
            yield message
            if isinstance(message, (CompleteMessage, ErrorMessage)):
                self._final = message
                return

    def result(self, timeout: Optional[float] = None) -> CleaningReport:
        """Drain the stream and return the report; raises on error or cancellation."""

        final: Optional[WorkerMessage] = None
        for message in self.messages(timeout=timeout):
            final = message
        if isinstance(final, CompleteMessage):
            return final.report
        if isinstance(final, ErrorMessage) and final.detail == CANCELLED_DETAIL:
            raise OperationCancelled("cleaning scan cancelled")
        detail = final.detail if isinstance(final, ErrorMessage) else "no result"
        raise RuntimeError(f"Cleaning worker failed: {detail}")


class CleaningWorker:
    """Runs cleaning scans off the caller's thread, one job per message."""

    def __init__(self, *, use_process: Optional[bool] = None, max_workers: int = 1) -> None:
        self.use_process = settings.cleaning_use_process if use_process is None else use_process
        self.max_workers = max_workers
        self._executor: Optional[Executor] = None
        self._manager = None

    def _ensure_executor(self) -> Executor:
        if self._executor is None:
            if self.use_process:
                self._manager = multiprocessing.Manager()
                self._executor = ProcessPoolExecutor(max_workers=self.max_workers)
            else:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="cleaning-worker"
                )
        return self._executor

    def _new_channel(self) -> tuple[Any, CancellationToken]:
        if self._manager is not None:
            return self._manager.Queue(), CancellationToken(event=self._manager.Event())
        return queue.Queue(), CancellationToken()

    def post_message(self, message: Union[StartCleaningMessage, Mapping[str, Any]]) -> CleaningJob:
        """Accept a ``START_CLEANING`` message and start the scan."""

        if isinstance(message, StartCleaningMessage):
            payload = message.model_dump()
        else:
            if message.get("type") != "START_CLEANING":
                raise ValueError(f"Unsupported worker message type '{message.get('type')}'.")
            payload = {
                "type": "START_CLEANING",
                "data": [record_to_payload(record) for record in message.get("data") or []],
            }

        executor = self._ensure_executor()
        channel, token = self._new_channel()
        future = executor.submit(clean_in_context, payload, channel, token)
        logger.debug(f"Submitted cleaning batch of {len(payload['data'])} records")
        return CleaningJob(future, channel, token)

    def start(self, records: Sequence[Union[GeoRecord, Mapping[str, Any]]]) -> CleaningJob:
        return self.post_message({"type": "START_CLEANING", "data": list(records)})

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait, cancel_futures=True)
            self._executor = None
        if self._manager is not None:
            self._manager.shutdown()
            self._manager = None

    def __enter__(self) -> "CleaningWorker":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
