"""PPI proximity scoring: static seed-gene walks and phenotype-weighted seeds."""

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Protocol, Sequence

import numpy as np
import structlog

from hiphive_pipeline.network.matrix import ProximityMatrix
from hiphive_pipeline.phenotype.models import GeneModelPhenotypeMatch

logger = structlog.get_logger(__name__)

DEFAULT_HIGH_QUALITY_SCORE_CUTOFF = 0.6


@dataclass(frozen=True)
class GeneMatch:
    """Closest phenotype-matched seed gene in the network for a query gene.

    Attributes:
        query_gene_id: Gene being scored
        match_gene_id: Seed gene giving the highest weighted proximity (0 if none)
        score: PPI score for the query gene
        best_match_models: Best phenotype evidence of the seed gene
    """

    query_gene_id: int = 0
    match_gene_id: int = 0
    score: float = 0.0
    best_match_models: tuple[GeneModelPhenotypeMatch, ...] = field(default=())


NO_HIT = GeneMatch()


class ProximityScorer(Protocol):
    """Anything that can give a PPI score for a gene."""

    def score(self, entrez_gene_id: int) -> float:
        ...


class WalkerProximityScorer:
    """
    Static seed-gene proximity (ExomeWalker style).

    The seed genes' columns are summed into one combined vector; a gene's
    score is its entry in that vector. Seeds missing from the matrix are
    dropped with a warning. If no seed remains every gene scores 0.
    """

    def __init__(self, matrix: ProximityMatrix, seed_genes: Iterable[int]):
        self.matrix = matrix
        requested = list(dict.fromkeys(int(g) for g in seed_genes))
        self.seed_genes: list[int] = []
        for gene_id in requested:
            if matrix.contains_gene(gene_id):
                self.seed_genes.append(gene_id)
            else:
                logger.warning("seed_gene_not_in_matrix", gene_id=gene_id)

        if self.seed_genes:
            self.combined_proximity_vector = np.sum(
                [matrix.column_vector(gene_id) for gene_id in self.seed_genes], axis=0
            )
            logger.info(
                "walker_seed_genes",
                requested=len(requested),
                used=len(self.seed_genes),
            )
        else:
            self.combined_proximity_vector = np.zeros(matrix.num_rows)
            logger.error(
                "no_seed_genes_in_matrix",
                requested=requested,
                message="all proximity scores default to 0",
            )

    def score(self, entrez_gene_id: int) -> float:
        if not self.seed_genes or not self.matrix.contains_gene(entrez_gene_id):
            return 0.0
        return float(self.combined_proximity_vector[self.matrix.row_index(entrez_gene_id)])


class PhenotypeWeightedProximityScorer:
    """
    Dynamic phenotype-weighted proximity (HiPhive style).

    Seeds are genes whose best phenotype score exceeds the cutoff and which
    are in the matrix. Each seed's column is multiplied by its phenotype
    score. A gene scores the largest weighted cell in its row over all seeds
    other than itself, plus score_offset. No positive cell means NO_HIT.
    """

    def __init__(
        self,
        matrix: ProximityMatrix,
        best_gene_models: Mapping[int, Sequence[GeneModelPhenotypeMatch]],
        high_quality_score_cutoff: float = DEFAULT_HIGH_QUALITY_SCORE_CUTOFF,
        score_offset: float = 0.0,
    ):
        self.matrix = matrix
        self.best_gene_models = {
            gene_id: tuple(models) for gene_id, models in best_gene_models.items()
        }
        self.score_offset = score_offset

        seed_scores: dict[int, float] = {}
        for gene_id in sorted(self.best_gene_models):
            if not matrix.contains_gene(gene_id):
                continue
            for model_match in self.best_gene_models[gene_id]:
                score = model_match.score
                if score > high_quality_score_cutoff and score > seed_scores.get(gene_id, -1.0):
                    seed_scores[gene_id] = score

        self.seed_gene_ids: list[int] = list(seed_scores)
        self.seed_scores = np.array([seed_scores[g] for g in self.seed_gene_ids], dtype=np.float64)

        logger.info(
            "high_quality_phenotype_seeds",
            seeds=len(self.seed_gene_ids),
            cutoff=high_quality_score_cutoff,
        )

        if self.seed_gene_ids:
            weighted = np.stack(
                [matrix.column_vector(g) for g in self.seed_gene_ids], axis=1
            )
            self.weighted_matrix = weighted * self.seed_scores
            logger.debug(
                "weighted_ppi_matrix_built",
                rows=self.weighted_matrix.shape[0],
                columns=len(self.seed_gene_ids),
                source_rows=matrix.num_rows,
            )
        else:
            self.weighted_matrix = np.zeros((matrix.num_rows, 0))

    @classmethod
    def empty(cls) -> "PhenotypeWeightedProximityScorer":
        """Scorer with no matrix and no seeds; every gene is NO_HIT."""
        return cls(ProximityMatrix.empty(), {})

    def closest_phenotype_match_in_network(self, entrez_gene_id: int) -> GeneMatch:
        """
        Find the seed gene with the highest weighted proximity to a gene.

        Ties go to the seed with the lower gene id.
        """
        if not self.seed_gene_ids or not self.matrix.contains_gene(entrez_gene_id):
            return NO_HIT

        row = self.weighted_matrix[self.matrix.row_index(entrez_gene_id)].copy()
        for column, seed_gene_id in enumerate(self.seed_gene_ids):
            # No credit for proximity to itself
            if seed_gene_id == entrez_gene_id:
                row[column] = 0.0

        best_column = int(np.argmax(row))
        best_cell = float(row[best_column])
        if not best_cell > 0:
            return NO_HIT

        closest_gene_id = self.seed_gene_ids[best_column]
        return GeneMatch(
            query_gene_id=entrez_gene_id,
            match_gene_id=closest_gene_id,
            score=self.score_offset + best_cell,
            best_match_models=self.best_gene_models.get(closest_gene_id, ()),
        )

    def score(self, entrez_gene_id: int) -> float:
        return self.closest_phenotype_match_in_network(entrez_gene_id).score


def best_models_by_organism(
    gene_models: Mapping[int, Sequence[GeneModelPhenotypeMatch]],
    organisms: Optional[Iterable] = None,
) -> dict[int, list[GeneModelPhenotypeMatch]]:
    """Keep the highest scoring model per organism for each gene."""
    organisms = list(organisms) if organisms is not None else None
    result: dict[int, list[GeneModelPhenotypeMatch]] = {}
    for gene_id, models in gene_models.items():
        best: dict = {}
        for model_match in models:
            if organisms is not None and model_match.organism not in organisms:
                continue
            current = best.get(model_match.organism)
            if current is None or model_match.score > current.score:
                best[model_match.organism] = model_match
        if best:
            result[gene_id] = list(best.values())
    return result
