"""
Analysis pipeline.

Chains the stages for one ingest run:
  extract files -> parser -> timeline builder -> change analyzer -> Dataset

and runs the clustering stage on request:
  Dataset -> movers in the configured windows -> clustering engine

Reading uploads is the only asynchronous step. Every ingest builds a new
Dataset from scratch; nothing is updated incrementally.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol, Sequence, Union

import numpy as np

from lokalradar.analysis.dataset import Dataset
from lokalradar.clustering.engine import ClusteringEngine, ClusteringResult
from lokalradar.config import Settings, settings as default_settings
from lokalradar.exceptions import DataFormatError, InsufficientDataError
from lokalradar.registry.parser import ParsedExtract, parse_extract
from lokalradar.timeline.builder import TimelineBuilder

logger = logging.getLogger(__name__)


ExtractContent = Union[bytes, str]


class UploadedFile(Protocol):
    """Anything with a filename and an async read(), e.g. FastAPI's UploadFile."""

    filename: Optional[str]

    async def read(self) -> bytes: ...


@dataclass
class IngestStats:
    """Bookkeeping for one ingest run."""

    files_received: int = 0
    files_used: int = 0
    files_without_year: list[str] = field(default_factory=list)
    files_without_rows: list[str] = field(default_factory=list)
    rows_parsed: int = 0

    def to_dict(self) -> dict:
        return {
            "files_received": self.files_received,
            "files_used": self.files_used,
            "files_without_year": self.files_without_year,
            "files_without_rows": self.files_without_rows,
            "rows_parsed": self.rows_parsed,
        }


class AnalysisPipeline:
    """
    Runs ingest and clustering with settings-driven defaults.

    Holds no analysis state; callers keep the returned Dataset and
    ClusteringResult themselves.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        char_map: Optional[dict[int, str]] = None,
    ):
        self.config = config or default_settings
        self.char_map = char_map
        self.last_ingest_stats = IngestStats()

    def parse_all(self, files: Iterable[tuple[str, ExtractContent]]) -> list[ParsedExtract]:
        """Parse every (filename, content) pair, keeping only usable extracts."""
        stats = IngestStats()
        usable = []

        for filename, content in files:
            stats.files_received += 1
            parsed = parse_extract(
                content,
                filename,
                char_map=self.char_map,
                remap=self.config.legacy_remap_enabled,
            )
            if not parsed.rows:
                stats.files_without_rows.append(filename)
                continue
            if parsed.year is None:
                stats.files_without_year.append(filename)
                continue
            stats.files_used += 1
            stats.rows_parsed += len(parsed.rows)
            usable.append(parsed)

        self.last_ingest_stats = stats
        return usable

    def process(self, files: Iterable[tuple[str, ExtractContent]]) -> Dataset:
        """
        Build a Dataset from already-read extract files.

        Raises:
            DataFormatError: No file produced rows with a known year
        """
        extracts = self.parse_all(files)
        stats = self.last_ingest_stats

        if not extracts:
            logger.warning(f"Ingest produced no usable rows: {stats.to_dict()}")
            raise DataFormatError(
                "None of the files contained usable rows",
                context={"ingest": stats.to_dict()},
            )

        registry = TimelineBuilder(self.config.reference_year_policy).build(extracts)
        dataset = Dataset.from_registry(registry)

        logger.info(
            f"Ingested {stats.files_used}/{stats.files_received} files, "
            f"{stats.rows_parsed} rows, {len(registry)} companies, "
            f"reference year {registry.reference_year}"
        )
        return dataset

    async def ingest(
        self,
        uploads: Sequence[Union[UploadedFile, tuple[str, ExtractContent]]],
    ) -> Dataset:
        """
        Ingest entrypoint: read every upload, then build the Dataset.

        All reads complete before timeline building starts.
        """
        files = await read_uploads(uploads)
        return self.process(files)

    def cluster(
        self,
        dataset: Dataset,
        k: Optional[int] = None,
        windows: Optional[Sequence[int]] = None,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> ClusteringResult:
        """
        Cluster the movers from the given 'years ago' windows.

        Raises:
            InsufficientDataError: Fewer usable movers than k
        """
        k = k if k is not None else self.config.cluster_count
        windows = list(windows) if windows is not None else list(self.config.move_windows)
        seed = seed if seed is not None else self.config.clustering_seed

        candidates = dataset.candidates_for_windows(windows)
        engine = ClusteringEngine(
            k=k,
            max_iterations=self.config.max_iterations,
            seed=seed,
            rng=rng,
        )
        result = engine.cluster(candidates, dataset.reference_year)

        if result.is_empty:
            raise InsufficientDataError(
                f"Need at least {k} movers with usable figures, found "
                f"{result.total_items - result.excluded_items}",
                context={"k": k, "windows": windows, "candidates": result.total_items},
            )
        return result

    async def cluster_async(self, dataset: Dataset, **kwargs) -> ClusteringResult:
        """Yield to the event loop once, then run the CPU-bound clustering."""
        await asyncio.sleep(0)
        return self.cluster(dataset, **kwargs)


async def read_uploads(
    uploads: Sequence[Union[UploadedFile, tuple[str, ExtractContent]]],
) -> list[tuple[str, ExtractContent]]:
    """Read uploads into (filename, content) pairs, in the given order."""
    files = []
    for upload in uploads:
        if isinstance(upload, tuple):
            files.append(upload)
            continue
        content = await upload.read()
        files.append((upload.filename or "", content))
    return files
