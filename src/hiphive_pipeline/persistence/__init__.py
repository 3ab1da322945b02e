"""Persistence layer for the phenotype catalog, results and provenance."""

from hiphive_pipeline.persistence.duckdb_store import PipelineStore
from hiphive_pipeline.persistence.provenance import ProvenanceTracker

__all__ = ["PipelineStore", "ProvenanceTracker"]
