import logging

from tqdm import tqdm

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Progress bar for the entities of one kind being copied."""

    def __init__(self, item_type: str, total: int, disable: bool = False):
        self.item_type = item_type
        self.total = total
        self.processed = 0
        self._bar = tqdm(
            total=total,
            desc=item_type,
            unit=item_type.lower().rstrip("s"),
            disable=disable,
        )

    def update(self, count: int) -> None:
        self.processed += count
        self._bar.update(count)

    def close(self) -> None:
        self._bar.close()
        logger.debug(
            "%s copied (%d/%d)", self.item_type, self.processed, self.total
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
