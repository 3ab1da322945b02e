"""Pydantic models for pipeline configuration."""

import hashlib
import json
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

# Tokens accepted in a run_params string, e.g. "human,mouse,fish,ppi"
RUN_PARAMETERS = ("human", "mouse", "fish", "ppi")


class InvalidRunParameterError(ValueError):
    """Raised when a run_params string contains an unknown token."""


def parse_run_params(run_params: Optional[str]) -> frozenset[str]:
    """
    Parse a comma-separated run_params string into the set of enabled steps.

    An empty or missing string enables everything, which mirrors the default
    'human,mouse,fish,ppi'.

    Args:
        run_params: Comma-separated subset of RUN_PARAMETERS

    Returns:
        Frozen set of enabled run parameters

    Raises:
        InvalidRunParameterError: If any token is not a valid run parameter
    """
    if not run_params or not run_params.strip():
        return frozenset(RUN_PARAMETERS)

    enabled = set()
    for token in run_params.split(","):
        param = token.strip()
        if param not in RUN_PARAMETERS:
            raise InvalidRunParameterError(f"'{param}' is not a valid parameter.")
        enabled.add(param)
    return frozenset(enabled)


class DataVersions(BaseModel):
    """Version information for the phenotype and interaction data."""

    hpo_release: str = Field(
        default="2024-04-26",
        description="Human Phenotype Ontology release",
    )
    phenotype_data_version: str = Field(
        default="2406",
        description="Release of the phenotype match/model catalog",
    )
    string_version: str = Field(
        default="10.0",
        description="STRING release the random-walk matrix was built from",
    )


class PrioritiserConfig(BaseModel):
    """Options controlling which organisms and PPI scoring a run uses."""

    run_params: str = Field(
        default="human,mouse,fish,ppi",
        description="Comma-separated subset of human,mouse,fish,ppi",
    )
    disease_id: str = Field(
        default="",
        description="Benchmark disease id whose models are hidden from scoring",
    )
    candidate_gene_symbol: str = Field(
        default="",
        description="Benchmark candidate gene symbol",
    )
    high_quality_score_cutoff: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Phenotype score a gene must exceed to seed dynamic PPI scoring",
    )
    ppi_mode: Literal["dynamic", "static"] = Field(
        default="dynamic",
        description="dynamic: phenotype-weighted seeds, static: fixed seed_genes",
    )
    seed_genes: list[int] = Field(
        default_factory=list,
        description="Entrez gene ids used as seeds in static PPI mode",
    )
    ppi_score_offset: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Constant added to a dynamic PPI hit (0.5 reproduces the tuned HiPhive setting)",
    )
    nan_scores: Literal["skip", "propagate"] = Field(
        default="skip",
        description="What to do with a model whose computed score is NaN",
    )

    @field_validator("run_params")
    @classmethod
    def validate_run_params(cls, v: str) -> str:
        """Reject unknown run parameters at load time."""
        parse_run_params(v)
        return v


class ExecutionConfig(BaseModel):
    """Configuration for the parallel model-scoring step."""

    executor: Literal["process", "thread"] = Field(
        default="process",
        description="Worker pool type used to score models",
    )
    max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Worker count (None = cpu count, 1 = score inline)",
    )
    chunk_size: int = Field(
        default=500,
        ge=1,
        description="Number of models scored per worker task",
    )


class PipelineConfig(BaseModel):
    """Main pipeline configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory for run outputs and provenance",
    )
    duckdb_path: Path = Field(
        ...,
        description="Path to DuckDB phenotype catalog and result store",
    )
    matrix_path: Optional[Path] = Field(
        default=None,
        description="Path to the random-walk proximity matrix (.npz)",
    )
    versions: DataVersions = Field(
        default_factory=DataVersions,
        description="Data version information",
    )
    prioritiser: PrioritiserConfig = Field(
        default_factory=PrioritiserConfig,
        description="Prioritiser run options",
    )
    execution: ExecutionConfig = Field(
        default_factory=ExecutionConfig,
        description="Parallel execution settings",
    )

    @field_validator("data_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tracking which settings produced a ranking.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
