"""
Off-caller-thread execution of the pipeline.

RecoWorker runs run_pipeline on a single background thread and always produces exactly
one terminal ResultMessage per submission. Progress and results go to a one-way listener.
A newer submission supersedes older ones: their messages are no longer delivered to the
listener, though their futures still resolve.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Optional, Union

from .models.config import RecoConfig, resolve_config
from .models.messages import ProgressMessage, RecoRequest, ResultMessage
from .stages.orchestrator import run_pipeline

logger = logging.getLogger(__name__)

Message = Union[ProgressMessage, ResultMessage]
Listener = Callable[[Message], None]


def _elapsed_ms(t0: float) -> int:
    return int(round((time.perf_counter() - t0) * 1000))


def run_sync(
    request: Union[RecoRequest, Dict],
    config: Optional[RecoConfig] = None,
    on_progress: Optional[Callable[[ProgressMessage], None]] = None,
) -> ResultMessage:
    """
    Run the pipeline on the calling thread and return the terminal result.

    Any exception raised inside the pipeline, including request validation, is logged
    and converted into the empty result with error set.
    """
    t0 = time.perf_counter()
    try:
        if isinstance(request, dict):
            request = RecoRequest.model_validate(request)

        def progress(stage: str, percent: int) -> None:
            if on_progress is not None:
                on_progress(ProgressMessage(stage=stage, percent=percent))

        profile, shelves = run_pipeline(request, resolve_config(config), progress)
        return ResultMessage(
            taste_profile=profile,
            shelves=shelves,
            compute_time_ms=_elapsed_ms(t0),
        )
    except Exception as e:
        logger.exception("[worker] Pipeline failed: %s", e)
        return ResultMessage.failed(f"{type(e).__name__}: {e}", _elapsed_ms(t0))


class RecoWorker:
    """Single background worker; the latest submission wins."""

    def __init__(self, config: Optional[RecoConfig] = None, listener: Optional[Listener] = None):
        self.config = resolve_config(config)
        self.listener = listener
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="reco-worker")
        self._lock = threading.Lock()
        self._generation = 0

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _deliver(self, generation: int, message: Message, listener: Optional[Listener]) -> None:
        if listener is None or not self._is_current(generation):
            return
        try:
            listener(message)
        except Exception:
            # Listener errors are logged, never propagated into the run
            logger.exception("[worker] Listener raised on %s message", message.type)

    def _run(self, generation: int, request: Union[RecoRequest, Dict], listener: Optional[Listener]) -> ResultMessage:
        if not self._is_current(generation):
            logger.info("[worker] Request generation=%d superseded before start; result will not be delivered", generation)
        result = run_sync(request, self.config, lambda msg: self._deliver(generation, msg, listener))
        self._deliver(generation, result, listener)
        return result

    def submit(
        self,
        request: Union[RecoRequest, Dict],
        listener: Optional[Listener] = None,
    ) -> "Future[ResultMessage]":
        """
        Queue a request; returns a future resolving to its terminal ResultMessage.

        listener replaces the worker-wide listener for this submission only.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
        return self._executor.submit(self._run, generation, request, listener or self.listener)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "RecoWorker":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
