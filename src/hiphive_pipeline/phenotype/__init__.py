"""Phenotype matching and Phenodigm-style model scoring."""

from hiphive_pipeline.phenotype.matcher import (
    OrganismPhenotypeMatcher,
    RawModelScore,
    build_phenotype_matcher,
)
from hiphive_pipeline.phenotype.models import (
    Gene,
    GeneModel,
    GeneModelPhenotypeMatch,
    ModelPhenotypeMatch,
    Organism,
    PhenotypeMatch,
    PhenotypeTerm,
)
from hiphive_pipeline.phenotype.query import QueryPhenotypeMatch, best_match, match_sort_key
from hiphive_pipeline.phenotype.scorer import (
    ModelScorer,
    ScoringMode,
    calculate_combined_score,
)

__all__ = [
    "Organism",
    "Gene",
    "PhenotypeTerm",
    "PhenotypeMatch",
    "GeneModel",
    "ModelPhenotypeMatch",
    "GeneModelPhenotypeMatch",
    "QueryPhenotypeMatch",
    "best_match",
    "match_sort_key",
    "OrganismPhenotypeMatcher",
    "RawModelScore",
    "build_phenotype_matcher",
    "ModelScorer",
    "ScoringMode",
    "calculate_combined_score",
]
