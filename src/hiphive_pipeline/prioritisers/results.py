"""Candidate genes and per-gene prioritisation results."""

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from hiphive_pipeline.phenotype.models import (
    Gene,
    GeneModelPhenotypeMatch,
    Organism,
    PhenotypeTerm,
)


def max_score(scores: Iterable[float]) -> float:
    """Max of scores, 0.0 if empty. Any NaN makes the result NaN."""
    best = 0.0
    for score in scores:
        if math.isnan(score):
            return math.nan
        best = max(best, score)
    return best


def fuse_scores(phenotype_score: float, ppi_score: float) -> float:
    """Final gene score: the larger of the phenotype and PPI scores."""
    return max_score((phenotype_score, ppi_score))


@dataclass(frozen=True)
class GeneScoreResult:
    """
    Final score for one gene.

    score is max(phenotype score, ppi_score). phenotype_evidence holds the
    best model per organism for the gene itself; ppi_evidence holds the best
    models of the closest phenotype-matched gene in the interaction network.
    """

    gene_id: int
    gene_symbol: str
    score: float
    prioritiser: str = "HIPHIVE"
    query_phenotype_terms: tuple[PhenotypeTerm, ...] = ()
    phenotype_evidence: tuple[GeneModelPhenotypeMatch, ...] = ()
    ppi_evidence: tuple[GeneModelPhenotypeMatch, ...] = ()
    ppi_score: float = 0.0
    candidate_gene_match: bool = False
    closest_ppi_gene_id: int = field(default=0, compare=False)

    @property
    def phenotype_score(self) -> float:
        return max_score(m.score for m in self.phenotype_evidence)

    def best_match_for(self, organism: Organism) -> Optional[GeneModelPhenotypeMatch]:
        """Top scoring evidence for an organism, or None."""
        best = None
        for match in self.phenotype_evidence:
            if match.organism == organism and match.score > (best.score if best else 0.0):
                best = match
        return best

    def _organism_score(self, organism: Organism) -> float:
        best = self.best_match_for(organism)
        return best.score if best is not None else 0.0

    @property
    def human_score(self) -> float:
        return self._organism_score(Organism.HUMAN)

    @property
    def mouse_score(self) -> float:
        return self._organism_score(Organism.MOUSE)

    @property
    def fish_score(self) -> float:
        return self._organism_score(Organism.FISH)

    @property
    def disease_matches(self) -> list[GeneModelPhenotypeMatch]:
        """Human disease evidence, highest score first."""
        human = [m for m in self.phenotype_evidence if m.organism == Organism.HUMAN]
        return sorted(human, key=lambda m: m.score, reverse=True)


def rank_results(results: Iterable[GeneScoreResult]) -> list[GeneScoreResult]:
    """Order results by descending score, then gene symbol. NaN scores go last."""
    def rank_key(result: GeneScoreResult) -> tuple[bool, float, str]:
        if math.isnan(result.score):
            return (True, 0.0, result.gene_symbol)
        return (False, -result.score, result.gene_symbol)

    return sorted(results, key=rank_key)
