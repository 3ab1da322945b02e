"""Phenodigm-style model scoring normalised against self-hit baselines."""

import math
from enum import Enum
from typing import Optional

from hiphive_pipeline.phenotype.matcher import OrganismPhenotypeMatcher
from hiphive_pipeline.phenotype.models import GeneModel, ModelPhenotypeMatch
from hiphive_pipeline.phenotype.query import QueryPhenotypeMatch


class ScoringMode(str, Enum):
    """Which baseline a model score is normalised against.

    SINGLE_CROSS_SPECIES uses the scored organism's own baseline (HP-HP, or
    HP-MP/HP-ZP when only one other organism is compared). MULTI_CROSS_SPECIES
    uses the human HP-HP baseline so scores are comparable across organisms.
    """

    SINGLE_CROSS_SPECIES = "single_cross_species"
    MULTI_CROSS_SPECIES = "multi_cross_species"


def _ratio(value: float, baseline: float) -> float:
    # A zero baseline saturates the score rather than raising
    if baseline == 0:
        return math.inf
    return value / baseline


def calculate_combined_score(
    max_model_match_score: float,
    sum_model_best_match_scores: float,
    row_column_count: int,
    best_max_score: float,
    best_avg_score: float,
) -> float:
    """
    Combine raw model scores into a normalised score in (0, 1].

    combined = 50 * (max / best_max + (sum / row_column_count) / best_avg),
    capped at 100, then divided by 100. A zero sum yields 0.0.

    Args:
        max_model_match_score: Highest forward/reciprocal best-hit score
        sum_model_best_match_scores: Sum of forward and reciprocal best hits
        row_column_count: Number of query terms plus matched model phenotypes
        best_max_score: Baseline maximum self-hit score
        best_avg_score: Baseline average self-hit score

    Returns:
        Model score
    """
    if sum_model_best_match_scores <= 0:
        return 0.0
    avg_best_hit_score = sum_model_best_match_scores / row_column_count
    combined_score = 50 * (
        _ratio(max_model_match_score, best_max_score)
        + _ratio(avg_best_hit_score, best_avg_score)
    )
    if combined_score > 100:
        combined_score = 100
    return combined_score / 100


class ModelScorer:
    """
    Scores models for one organism.

    Use for_single_cross_species or for_multi_cross_species rather than the
    constructor. The scorer is immutable and picklable so it can be shipped to
    worker processes.
    """

    def __init__(
        self,
        matcher: OrganismPhenotypeMatcher,
        mode: ScoringMode,
        baseline: QueryPhenotypeMatch,
    ):
        self.matcher = matcher
        self.mode = mode
        self.best_max_score = baseline.max_match_score
        self.best_avg_score = baseline.best_avg_score
        # Denominator always uses every query term, matched or not
        self.num_query_phenotypes = len(baseline.query_terms)

    @classmethod
    def for_single_cross_species(cls, matcher: OrganismPhenotypeMatcher) -> "ModelScorer":
        """Scorer normalised against the matcher's own organism baseline."""
        return cls(matcher, ScoringMode.SINGLE_CROSS_SPECIES, matcher.query_phenotype_match)

    @classmethod
    def for_multi_cross_species(
        cls,
        reference: QueryPhenotypeMatch,
        matcher: OrganismPhenotypeMatcher,
    ) -> "ModelScorer":
        """Scorer normalised against the human reference baseline."""
        return cls(matcher, ScoringMode.MULTI_CROSS_SPECIES, reference)

    @property
    def organism(self):
        return self.matcher.organism

    def score_model(self, model: GeneModel) -> Optional[ModelPhenotypeMatch]:
        """
        Score one model.

        Returns:
            ModelPhenotypeMatch, or None when no model phenotype matched any
            query term (sum of best hits is zero)
        """
        raw = self.matcher.match_phenotype_ids(model.phenotype_ids)
        if raw.sum_model_best_match_scores == 0:
            return None

        score = calculate_combined_score(
            raw.max_model_match_score,
            raw.sum_model_best_match_scores,
            self.num_query_phenotypes + len(raw.matching_phenotypes),
            self.best_max_score,
            self.best_avg_score,
        )
        return ModelPhenotypeMatch(
            score=score,
            model=model,
            best_phenotype_matches=raw.best_phenotype_matches,
        )

    def __repr__(self) -> str:
        return (
            f"ModelScorer(organism={self.organism.value}, mode={self.mode.value}, "
            f"best_max_score={self.best_max_score}, best_avg_score={self.best_avg_score})"
        )
