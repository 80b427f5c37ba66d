from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Callable, Dict, List, Optional

from docreview.application.batch.coordinator import BatchCoordinator

logger = logging.getLogger(__name__)


class BatchRegistry:
  """In-process map of batch id to the coordinator driving it.

  Batches whose completion fired more than ``retention_seconds`` ago are
  evicted on the next ``add`` or ``ids`` call. ``clock`` must be the clock
  the coordinators were built with.
  """

  def __init__(self, retention_seconds: float = 3600.0, clock: Callable[[], float] = time.monotonic) -> None:
    self._batches: Dict[str, BatchCoordinator] = {}
    self._lock = Lock()
    self._retention_seconds = retention_seconds
    self._clock = clock

  def add(self, batch_id: str, coordinator: BatchCoordinator) -> None:
    with self._lock:
      self._prune()
      self._batches[batch_id] = coordinator

  def get(self, batch_id: str) -> Optional[BatchCoordinator]:
    with self._lock:
      return self._batches.get(batch_id)

  def ids(self) -> List[str]:
    with self._lock:
      self._prune()
      return list(self._batches)

  def remove(self, batch_id: str) -> Optional[BatchCoordinator]:
    with self._lock:
      return self._batches.pop(batch_id, None)

  def _prune(self) -> None:
    now = self._clock()
    expired = [
      batch_id
      for batch_id, coordinator in self._batches.items()
      if coordinator.completed
      and coordinator.finished_at is not None
      and now - coordinator.finished_at >= self._retention_seconds
    ]
    for batch_id in expired:
      del self._batches[batch_id]
    if expired:
      logger.info("Evicted %d finished batches: %s", len(expired), expired)
