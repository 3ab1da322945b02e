"""Data-layer services consumed by the prioritisers."""

from hiphive_pipeline.services.base import (
    ModelCatalogService,
    PhenotypeMatchService,
    PriorityService,
    UnknownPhenotypeTermError,
)
from hiphive_pipeline.services.duckdb_service import (
    MATCHES_TABLE_NAME,
    MODELS_TABLE_NAME,
    TERMS_TABLE_NAME,
    DuckDBPriorityService,
    save_gene_models,
    save_phenotype_matches,
    save_phenotype_terms,
)

__all__ = [
    "PhenotypeMatchService",
    "ModelCatalogService",
    "PriorityService",
    "UnknownPhenotypeTermError",
    "DuckDBPriorityService",
    "save_phenotype_terms",
    "save_phenotype_matches",
    "save_gene_models",
    "TERMS_TABLE_NAME",
    "MATCHES_TABLE_NAME",
    "MODELS_TABLE_NAME",
]
