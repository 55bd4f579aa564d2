#!/usr/bin/env python3
"""
lighting_worker.py

Message-driven lighting calculator.

Hosts post {"type", "data"[, "id"]} messages and receive replies:

  calculate  {fixtures, room[, options]}         -> heatmap, metrics, spectrum
  optimize   {room, targetPPFD, fixtureModel}     -> optimized
  anything else                                   -> error (unsupported_operation)

handle() is the stateless dispatch: one message in, list of replies out,
never raising. LightingWorker runs handle() on a dedicated thread and drains
its inbox strictly in arrival order, posting each reply through a callback
(an outbox queue by default) so the caller's thread never blocks on the math.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from calc_errors import LightingError, LightingInputError, UnsupportedOperationError, error_code
from generate_grid import compute_room_heatmap
from irradiance import light_sources_from_fixtures
from lighting_config import LightingConfig
from ppfd_metrics import compute_power_metrics
from rect_layout import optimize_layout
from room_units import Room
from spectral_composite import compute_spectrum

logger = logging.getLogger(__name__)

Message = Dict[str, Any]
Reply = Dict[str, Any]


def _data(message: Message) -> Dict[str, Any]:
    data = message.get("data")
    if not isinstance(data, dict):
        raise LightingInputError("message data must be an object")
    return data


def run_calculate(data: Dict[str, Any], config: LightingConfig) -> List[Reply]:
    """Heatmap + metrics + spectrum; all three are built before any reply."""
    t0 = time.perf_counter()
    cfg = config.with_options(data.get("options"))
    sources = light_sources_from_fixtures(data.get("fixtures"))
    room = Room.from_dict(data.get("room"))

    heatmap = compute_room_heatmap(
        sources, room,
        resolution=cfg.resolution,
        canopy_fraction=cfg.canopy_fraction,
        conversion=cfg.ppfd_conversion,
    )
    metrics = compute_power_metrics(
        sources, room,
        samples=cfg.samples,
        rng=np.random.default_rng(cfg.seed),
        photoperiod_hours=cfg.photoperiod_hours,
        canopy_fraction=cfg.canopy_fraction,
        conversion=cfg.ppfd_conversion,
    )
    spectrum = compute_spectrum(sources)
    elapsed_ms = (time.perf_counter() - t0) * 1000.0

    logger.info("calculate: %d fixtures, %d heatmap points, avgPPFD=%d in %.1f ms",
                len(sources), len(heatmap), metrics.avgPPFD, elapsed_ms)
    return [
        {"type": "heatmap", "data": heatmap},
        {"type": "metrics", "data": metrics.to_message(calculationTime=elapsed_ms)},
        {"type": "spectrum", "data": spectrum},
    ]


def run_optimize(data: Dict[str, Any], config: LightingConfig) -> List[Reply]:
    room = Room.from_dict(data.get("room"))
    positions = optimize_layout(
        room, data.get("targetPPFD"), data.get("fixtureModel"),
        mount_offset=config.mount_offset,
    )
    return [{"type": "optimized", "data": positions}]


OPERATIONS: Dict[str, Callable[[Dict[str, Any], LightingConfig], List[Reply]]] = {
    "calculate": run_calculate,
    "optimize": run_optimize,
}


def error_reply(exc: BaseException) -> Reply:
    return {"type": "error", "error": str(exc), "code": error_code(exc)}


def handle(message: Any, config: Optional[LightingConfig] = None) -> List[Reply]:
    """Dispatch one message. Errors come back as a single error reply."""
    config = config or LightingConfig()
    msg_id = message.get("id") if isinstance(message, dict) else None

    try:
        if not isinstance(message, dict):
            raise LightingInputError("message must be an object with a 'type'")
        mtype = message.get("type")
        op = OPERATIONS.get(mtype) if isinstance(mtype, str) else None
        if op is None:
            logger.warning("Unknown message type: %r", mtype)
            raise UnsupportedOperationError(f"unsupported message type: {mtype!r}")
        replies = op(_data(message), config)
    except LightingError as e:
        replies = [error_reply(e)]
    except Exception as e:
        logger.exception("Unhandled error while processing %r", message.get("type") if isinstance(message, dict) else message)
        replies = [error_reply(e)]

    if msg_id is not None:
        for r in replies:
            r["id"] = msg_id
    return replies


# ──────────────────────────────────────────────────────────────────────────────
# Background worker
# ──────────────────────────────────────────────────────────────────────────────

_STOP = object()


class LightingWorker:
    """One calculator thread per use-site; FIFO inbox, replies via callback."""

    def __init__(self, config: Optional[LightingConfig] = None,
                 post_message: Optional[Callable[[Reply], None]] = None,
                 name: str = "lighting-worker"):
        self.config = config or LightingConfig()
        self.outbox: "queue.Queue[Reply]" = queue.Queue()
        self._post = post_message or self.outbox.put
        self._inbox: "queue.Queue[Any]" = queue.Queue()
        self._closing = False
        self._post_lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    def post_message(self, message: Message):
        with self._post_lock:
            if self._closing or not self.alive:
                raise RuntimeError("worker has been terminated")
            self._inbox.put(message)

    def get_reply(self, timeout: Optional[float] = None) -> Reply:
        """Next reply from the default outbox (raises queue.Empty on timeout)."""
        return self.outbox.get(timeout=timeout)

    def terminate(self, timeout: Optional[float] = None):
        """Stop after the message in flight; queued messages are dropped."""
        with self._post_lock:
            self._closing = True
            while True:
                try:
                    self._inbox.get_nowait()
                except queue.Empty:
                    break
            self._inbox.put(_STOP)
        self._thread.join(timeout)

    def _run(self):
        while True:
            message = self._inbox.get()
            if message is _STOP:
                break
            for reply in handle(message, self.config):
                try:
                    self._post(reply)
                except Exception:
                    logger.exception("post_message callback failed for %s reply", reply.get("type"))
        logger.debug("Worker %s stopped", self._thread.name)

    def __enter__(self) -> "LightingWorker":
        return self

    def __exit__(self, *exc):
        self.terminate()
