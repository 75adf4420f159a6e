"""
Ingest and clustering pipeline.
"""

from lokalradar.pipeline.runner import AnalysisPipeline, IngestStats, read_uploads

__all__ = ["AnalysisPipeline", "IngestStats", "read_uploads"]
