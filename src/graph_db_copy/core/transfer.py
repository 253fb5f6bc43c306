"""
Database transfer pipeline.

A copy runs in two phases. Nodes are read sequentially, grouped into batches
and written by a bounded pool of writer threads; every node batch records the
source to target identities it created in a mapping table. Only once every
node batch has been written does the relationship phase start, so that each
relationship endpoint can be translated to its target node.
"""

import itertools
import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from contextlib import contextmanager
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    TypeVar,
)

from ..database.interface import DataReader, DataWriter
from ..exceptions import CopyError, WriteFailureError
from ..mapping import MappingTable
from ..models import Node, Relationship
from ..options import CopyOptions
from .progress import ProgressReporter
from .state import SourceStateGuard

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProgressFactory = Callable[[str, int], ProgressReporter]


def batched(items: Iterable[T], size: int) -> Iterator[List[T]]:
    """Group consecutive items into lists of ``size``; the last may be shorter."""
    iterator = iter(items)
    while True:
        batch = list(itertools.islice(iterator, size))
        if not batch:
            return
        yield batch


class DataTransfer:
    """
    Copies every node and relationship from a reader to a writer.

    An instance performs a single copy. The mapping table built during the
    node phase is kept on the instance for inspection afterwards.
    """

    def __init__(
        self,
        reader: DataReader,
        writer: DataWriter,
        options: CopyOptions = CopyOptions.DEFAULT,
        guard: Optional[SourceStateGuard] = None,
        progress_factory: Optional[ProgressFactory] = None,
    ):
        self.reader = reader
        self.writer = writer
        self.options = options
        self.guard = guard or SourceStateGuard.disabled()
        self.progress_factory = progress_factory
        self.mapping_table: Optional[MappingTable] = None
        self.nodes_written = 0
        self.relationships_written = 0

    def copy_all(self) -> int:
        """
        Copy all nodes, then all relationships.

        Returns:
            Number of relationships written

        Raises:
            CopyError: If the source cannot be protected or a batch fails
        """
        with self.guard.protect():
            mapping_table = MappingTable()
            self.mapping_table = mapping_table
            self.nodes_written = self._copy_nodes(mapping_table)
            logger.info("Nodes writing complete - %d nodes written", self.nodes_written)
            self.relationships_written = self._copy_relationships(mapping_table)
            logger.info(
                "Relationships writing complete - %d relationships written",
                self.relationships_written,
            )
        return self.relationships_written

    def _copy_nodes(self, mapping_table: MappingTable) -> int:
        def write(batch: Sequence[Node]) -> int:
            mappings = self.writer.write_nodes(batch, self.options)
            if len(mappings) != len(batch):
                logger.warning(
                    "Node batch of %d produced %d mappings", len(batch), len(mappings)
                )
            mapping_table.insert(mappings)
            return len(mappings)

        with self._progress("Nodes", self.reader.total_node_count) as progress:
            return self._run_phase(
                "node",
                self.reader.read_nodes(),
                write,
                self.options.writer_concurrency,
                progress,
            )

    def _copy_relationships(self, mapping_table: MappingTable) -> int:
        def write(batch: Sequence[Relationship]) -> int:
            return self.writer.write_relationships(batch, mapping_table, self.options)

        with self._progress(
            "Relationships", self.reader.total_relationship_count
        ) as progress:
            return self._run_phase(
                "relationship",
                self.reader.read_relationships(),
                write,
                self.options.relationship_writer_concurrency,
                progress,
            )

    @contextmanager
    def _progress(
        self, item_type: str, total: Callable[[], int]
    ) -> Iterator[Optional[ProgressReporter]]:
        if self.progress_factory is None:
            yield None
            return
        reporter = self.progress_factory(item_type, total())
        try:
            yield reporter
        finally:
            reporter.close()

    def _run_phase(
        self,
        phase: str,
        items: Iterable[Any],
        write: Callable[[List[Any]], int],
        concurrency: int,
        progress: Optional[ProgressReporter],
    ) -> int:
        """
        Write ``items`` in batches with at most ``concurrency`` batches in flight.

        Returns only after every submitted batch has completed.
        """
        logger.info(
            "Start copying %ss (batch size %d, %d writers)",
            phase,
            self.options.batch_size,
            concurrency,
        )
        written = 0
        in_flight: Dict[Future, int] = {}
        executor = ThreadPoolExecutor(
            max_workers=concurrency, thread_name_prefix=f"{phase}-writer"
        )
        try:
            for index, batch in enumerate(batched(items, self.options.batch_size)):
                if progress is not None:
                    progress.update(len(batch))
                while len(in_flight) >= concurrency:
                    written += self._collect(phase, in_flight)
                in_flight[executor.submit(write, batch)] = index
            while in_flight:
                written += self._collect(phase, in_flight)
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            executor.shutdown(wait=True)
            close = getattr(items, "close", None)
            if close is not None:
                close()
        return written

    @staticmethod
    def _collect(phase: str, in_flight: Dict[Future, int]) -> int:
        done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
        written = 0
        for future in done:
            index = in_flight.pop(future)
            try:
                count = future.result()
            except CopyError as e:
                logger.error("Aborting %s batch %d: %s", phase, index, e)
                raise
            except Exception as e:
                logger.error("Failed to write %s batch %d: %s", phase, index, e)
                raise WriteFailureError(phase, index, e) from e
            logger.debug("Wrote %s batch %d (%d entities)", phase, index, count)
            written += count
        return written


def transfer(
    reader: DataReader,
    writer: DataWriter,
    options: CopyOptions = CopyOptions.DEFAULT,
    guard: Optional[SourceStateGuard] = None,
    progress_factory: Optional[ProgressFactory] = None,
) -> int:
    """Copy a whole database and return the number of relationships written."""
    return DataTransfer(reader, writer, options, guard, progress_factory).copy_all()
