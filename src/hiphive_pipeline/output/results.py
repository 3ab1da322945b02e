"""Conversion of prioritisation results to polars DataFrames."""

from typing import Iterable, Optional

import polars as pl

from hiphive_pipeline.persistence.duckdb_store import PipelineStore
from hiphive_pipeline.prioritisers.results import GeneScoreResult, rank_results

# Table name for DuckDB storage
RESULTS_TABLE_NAME = "prioritised_genes"

RESULTS_SCHEMA = {
    "run_id": pl.Utf8,
    "rank": pl.Int64,
    "gene_id": pl.Int64,
    "gene_symbol": pl.Utf8,
    "prioritiser": pl.Utf8,
    "score": pl.Float64,
    "phenotype_score": pl.Float64,
    "ppi_score": pl.Float64,
    "human_score": pl.Float64,
    "mouse_score": pl.Float64,
    "fish_score": pl.Float64,
    "best_model_id": pl.Utf8,
    "best_organism": pl.Utf8,
    "closest_ppi_gene_id": pl.Int64,
    "disease_ids": pl.Utf8,
    "candidate_gene_match": pl.Boolean,
}


def results_to_dataframe(
    results: Iterable[GeneScoreResult],
    run_id: Optional[str] = None,
) -> pl.DataFrame:
    """
    Flatten results into one row per gene, ranked.

    Args:
        results: GeneScoreResult records (any order)
        run_id: Optional run identifier stored on every row

    Returns:
        DataFrame with RESULTS_SCHEMA columns; rank starts at 1
    """
    rows = []
    for rank, result in enumerate(rank_results(results), start=1):
        best = max(result.phenotype_evidence, key=lambda m: m.score, default=None)
        rows.append({
            "run_id": run_id,
            "rank": rank,
            "gene_id": result.gene_id,
            "gene_symbol": result.gene_symbol,
            "prioritiser": result.prioritiser,
            "score": result.score,
            "phenotype_score": result.phenotype_score,
            "ppi_score": result.ppi_score,
            "human_score": result.human_score,
            "mouse_score": result.mouse_score,
            "fish_score": result.fish_score,
            "best_model_id": best.model_id if best else None,
            "best_organism": best.organism.value if best else None,
            "closest_ppi_gene_id": result.closest_ppi_gene_id or None,
            "disease_ids": ",".join(m.model.disease_id or m.model_id for m in result.disease_matches),
            "candidate_gene_match": result.candidate_gene_match,
        })
    return pl.DataFrame(rows, schema=RESULTS_SCHEMA)


def save_results(
    store: PipelineStore,
    results: Iterable[GeneScoreResult],
    run_id: Optional[str] = None,
    replace: bool = False,
) -> pl.DataFrame:
    """Append (or replace) the results of a run in the prioritised_genes table."""
    df = results_to_dataframe(results, run_id)
    store.save_dataframe(
        df,
        RESULTS_TABLE_NAME,
        description="Ranked gene prioritisation results",
        replace=replace,
    )
    return df
