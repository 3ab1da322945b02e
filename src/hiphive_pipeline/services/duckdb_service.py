"""DuckDB-backed phenotype match and model catalog service."""

from typing import Iterable, Optional

import polars as pl
import structlog

from hiphive_pipeline.persistence.duckdb_store import PipelineStore
from hiphive_pipeline.phenotype.models import (
    Gene,
    GeneModel,
    Organism,
    PhenotypeMatch,
    PhenotypeTerm,
)
from hiphive_pipeline.services.base import UnknownPhenotypeTermError

logger = structlog.get_logger(__name__)

# Table names for DuckDB storage
TERMS_TABLE_NAME = "phenotype_terms"
MATCHES_TABLE_NAME = "phenotype_matches"
MODELS_TABLE_NAME = "gene_models"

MATCHES_SCHEMA = {
    "organism": pl.Utf8,
    "query_id": pl.Utf8,
    "query_label": pl.Utf8,
    "match_id": pl.Utf8,
    "match_label": pl.Utf8,
    "simj": pl.Float64,
    "ic": pl.Float64,
    "score": pl.Float64,
    "lcs_id": pl.Utf8,
    "lcs_label": pl.Utf8,
}

MODELS_SCHEMA = {
    "organism": pl.Utf8,
    "model_id": pl.Utf8,
    "entrez_id": pl.Int64,
    "human_gene_symbol": pl.Utf8,
    "model_gene_id": pl.Utf8,
    "model_gene_symbol": pl.Utf8,
    "disease_id": pl.Utf8,
    "disease_term": pl.Utf8,
    "phenotype_ids": pl.Utf8,
}


def save_phenotype_terms(store: PipelineStore, terms: Iterable[PhenotypeTerm]) -> int:
    """Write the term catalog. Returns the number of terms written."""
    df = pl.DataFrame(
        [{"term_id": t.id, "label": t.label} for t in terms],
        schema={"term_id": pl.Utf8, "label": pl.Utf8},
    )
    store.save_dataframe(df, TERMS_TABLE_NAME, description="Phenotype ontology terms (HP, MP, ZP)")
    return df.height


def save_phenotype_matches(
    store: PipelineStore,
    matches_by_organism: dict[Organism, Iterable[PhenotypeMatch]],
) -> int:
    """Write precomputed query-term matches for each organism."""
    rows = []
    for organism, matches in matches_by_organism.items():
        for match in matches:
            rows.append({
                "organism": organism.value,
                "query_id": match.query_phenotype_id,
                "query_label": match.query_phenotype.label,
                "match_id": match.match_phenotype_id,
                "match_label": match.match_phenotype.label,
                "simj": match.simj,
                "ic": match.ic,
                "score": match.score,
                "lcs_id": match.lcs.id if match.lcs else None,
                "lcs_label": match.lcs.label if match.lcs else None,
            })
    df = pl.DataFrame(rows, schema=MATCHES_SCHEMA)
    store.save_dataframe(df, MATCHES_TABLE_NAME, description="HP to HP/MP/ZP phenotype matches")
    return df.height


def save_gene_models(store: PipelineStore, models: Iterable[GeneModel]) -> int:
    """Write disease and knockout models. Phenotype ids are comma-joined."""
    rows = [
        {
            "organism": m.organism.value,
            "model_id": m.model_id,
            "entrez_id": m.entrez_gene_id,
            "human_gene_symbol": m.human_gene_symbol,
            "model_gene_id": m.model_gene_id,
            "model_gene_symbol": m.model_gene_symbol,
            "disease_id": m.disease_id,
            "disease_term": m.disease_term,
            "phenotype_ids": ",".join(m.phenotype_ids),
        }
        for m in models
    ]
    df = pl.DataFrame(rows, schema=MODELS_SCHEMA)
    store.save_dataframe(df, MODELS_TABLE_NAME, description="Disease and knockout gene models")
    return df.height


class DuckDBPriorityService:
    """
    Serves phenotype terms, matches and models from the DuckDB catalog.

    Models and matches are read once per organism/term and cached for the
    life of the service, which matches the lifetime of one run.
    """

    def __init__(self, store: PipelineStore):
        self.store = store
        self._models_cache: dict[Organism, list[GeneModel]] = {}
        self._matches_cache: dict[tuple[str, Organism], set[PhenotypeMatch]] = {}

    def make_phenotype_terms(self, term_ids: Iterable[str]) -> list[PhenotypeTerm]:
        """
        Look up terms by id, keeping input order and dropping duplicates.

        Raises:
            UnknownPhenotypeTermError: If any id is not in the catalog
        """
        ids = list(dict.fromkeys(term_ids))
        if not ids:
            return []
        df = self.store.execute_query(
            f"SELECT term_id, label FROM {TERMS_TABLE_NAME} WHERE list_contains(?, term_id)",
            [ids],
        )
        labels = dict(zip(df["term_id"].to_list(), df["label"].to_list()))
        missing = [term_id for term_id in ids if term_id not in labels]
        if missing:
            logger.error("unknown_phenotype_terms", term_ids=missing)
            raise UnknownPhenotypeTermError(missing)
        return [PhenotypeTerm(term_id, labels[term_id] or "") for term_id in ids]

    def phenotype_matches_for(
        self, term: PhenotypeTerm, organism: Organism
    ) -> set[PhenotypeMatch]:
        """All precomputed matches of one query term against an organism's ontology."""
        key = (term.id, organism)
        if key not in self._matches_cache:
            df = self.store.execute_query(
                f"""
                SELECT match_id, match_label, simj, ic, score, lcs_id, lcs_label
                FROM {MATCHES_TABLE_NAME}
                WHERE organism = ? AND query_id = ?
                """,
                [organism.value, term.id],
            )
            self._matches_cache[key] = {
                PhenotypeMatch(
                    query_phenotype=term,
                    match_phenotype=PhenotypeTerm(row["match_id"], row["match_label"] or ""),
                    score=row["score"],
                    simj=row["simj"] or 0.0,
                    ic=row["ic"] or 0.0,
                    lcs=PhenotypeTerm(row["lcs_id"], row["lcs_label"] or "") if row["lcs_id"] else None,
                )
                for row in df.iter_rows(named=True)
            }
        return self._matches_cache[key]

    def models_for(self, organism: Organism) -> list[GeneModel]:
        """All models for an organism, ordered by model id."""
        if organism not in self._models_cache:
            df = self.store.execute_query(
                f"SELECT * FROM {MODELS_TABLE_NAME} WHERE organism = ? ORDER BY model_id",
                [organism.value],
            )
            self._models_cache[organism] = [
                GeneModel(
                    model_id=row["model_id"],
                    organism=organism,
                    entrez_gene_id=row["entrez_id"],
                    human_gene_symbol=row["human_gene_symbol"] or "",
                    phenotype_ids=_split_ids(row["phenotype_ids"]),
                    model_gene_id=row["model_gene_id"] or "",
                    model_gene_symbol=row["model_gene_symbol"] or "",
                    disease_id=row["disease_id"] or "",
                    disease_term=row["disease_term"] or "",
                )
                for row in df.iter_rows(named=True)
            ]
            logger.info(
                "models_loaded",
                organism=organism.value,
                models=len(self._models_cache[organism]),
            )
        return self._models_cache[organism]

    def all_genes(self) -> list[Gene]:
        """Every distinct human gene with at least one model, by symbol."""
        df = self.store.execute_query(f"""
            SELECT entrez_id, min(human_gene_symbol) AS gene_symbol
            FROM {MODELS_TABLE_NAME}
            GROUP BY entrez_id
            ORDER BY gene_symbol, entrez_id
        """)
        return [
            Gene(entrez_gene_id=row["entrez_id"], gene_symbol=row["gene_symbol"] or "")
            for row in df.iter_rows(named=True)
        ]


def _split_ids(phenotype_ids: Optional[str]) -> tuple[str, ...]:
    if not phenotype_ids:
        return ()
    return tuple(pid.strip() for pid in phenotype_ids.split(",") if pid.strip())
