# courier_tracker/core/tracking/projector.py
"""
Latest known position per courier.

The index is a cache derived from the location store: it can be dropped and
rebuilt at any time, and is never persisted itself.
"""

from __future__ import annotations

from typing import Iterable, TYPE_CHECKING

from courier_tracker.common.logger import get_logger
from courier_tracker.shared.models.location import StoredSample

if TYPE_CHECKING:
    from courier_tracker.core.tracking.store import LocationStore

logger = get_logger("tracking.projector")


def latest_per_courier(samples: Iterable[StoredSample]) -> dict[str, StoredSample]:
    """Reduces samples to the newest one per courier, whatever their order."""
    index: dict[str, StoredSample] = {}
    for sample in samples:
        _keep_newest(index, sample)
    return index


def _keep_newest(index: dict[str, StoredSample], sample: StoredSample) -> bool:
    current = index.get(sample.courier_id)
    # ties keep the entry already there
    if current is None or sample.is_newer_than(current):
        index[sample.courier_id] = sample
        return True
    return False


class LatestPositionProjector:
    """
    Maintains courier_id -> newest StoredSample.

    Every mutation happens synchronously, so concurrent handlers never see a
    half-updated index.
    """

    def __init__(self) -> None:
        self._index: dict[str, StoredSample] = {}
        self._warm = False
        # one buffer per rebuild waiting on the store
        self._rebuild_buffers: list[list[StoredSample]] = []

    @property
    def is_warm(self) -> bool:
        """True once the index reflects the store (after a rebuild)."""
        return self._warm

    def __len__(self) -> int:
        return len(self._index)

    def observe(self, sample: StoredSample) -> bool:
        """
        Applies one stored sample.

        Returns:
            True if the sample became the courier's projected position,
            False if a newer one was already there
        """
        for buffer in self._rebuild_buffers:
            buffer.append(sample)

        replaced = _keep_newest(self._index, sample)
        if not replaced:
            logger.debug(
                "Out-of-order sample %s for courier %s ignored by projection",
                sample.id,
                sample.courier_id,
            )
        return replaced

    def get(self, courier_id: str) -> StoredSample | None:
        return self._index.get(courier_id)

    def snapshot(self) -> dict[str, StoredSample]:
        """Point-in-time copy of the index."""
        return dict(self._index)

    async def rebuild(self, store: "LocationStore") -> None:
        """
        Replaces the index with one computed from store.query_all().

        Samples observed while the read is in flight are re-applied on top of
        the rebuilt index. On StoreError the current index is left untouched
        and the error propagates.
        """
        buffer: list[StoredSample] = []
        self._rebuild_buffers.append(buffer)
        try:
            samples = await store.query_all()
        finally:
            self._rebuild_buffers = [b for b in self._rebuild_buffers if b is not buffer]

        index = latest_per_courier(samples)
        for sample in buffer:
            _keep_newest(index, sample)

        self._index = index
        self._warm = True
        logger.info("Projection rebuilt: %s couriers from %s samples", len(index), len(samples))
