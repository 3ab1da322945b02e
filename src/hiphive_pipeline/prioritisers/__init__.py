"""Gene prioritisers: HiPhive, Phive and ExomeWalker."""

from hiphive_pipeline.prioritisers.errors import EmptyQueryError
from hiphive_pipeline.prioritisers.hiphive import HiPhivePrioritiser
from hiphive_pipeline.prioritisers.model_scoring import (
    best_model_per_gene,
    merge_best_models,
    score_best_models_per_gene,
)
from hiphive_pipeline.prioritisers.options import HiPhiveOptions
from hiphive_pipeline.prioritisers.phive import NO_MOUSE_MODEL_SCORE, PhivePrioritiser
from hiphive_pipeline.prioritisers.proximity import (
    NO_HIT,
    GeneMatch,
    PhenotypeWeightedProximityScorer,
    WalkerProximityScorer,
)
from hiphive_pipeline.prioritisers.results import (
    Gene,
    GeneScoreResult,
    fuse_scores,
    rank_results,
)
from hiphive_pipeline.prioritisers.walker import ExomeWalkerPrioritiser

__all__ = [
    "EmptyQueryError",
    "HiPhiveOptions",
    "HiPhivePrioritiser",
    "PhivePrioritiser",
    "NO_MOUSE_MODEL_SCORE",
    "ExomeWalkerPrioritiser",
    "best_model_per_gene",
    "merge_best_models",
    "score_best_models_per_gene",
    "GeneMatch",
    "NO_HIT",
    "PhenotypeWeightedProximityScorer",
    "WalkerProximityScorer",
    "Gene",
    "GeneScoreResult",
    "fuse_scores",
    "rank_results",
]
