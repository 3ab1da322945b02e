"""ExomeWalker: rank genes by random-walk proximity to known seed genes."""

from typing import Iterable, Sequence

import structlog

from hiphive_pipeline.network.matrix import ProximityMatrix
from hiphive_pipeline.prioritisers.proximity import WalkerProximityScorer
from hiphive_pipeline.prioritisers.results import Gene, GeneScoreResult, rank_results

logger = structlog.get_logger(__name__)


class ExomeWalkerPrioritiser:
    """PPI-only prioritiser. Phenotypes are not used."""

    def __init__(self, matrix: ProximityMatrix, seed_genes: Sequence[int]):
        self.matrix = matrix
        self.seed_genes = list(seed_genes)

    def prioritise(self, hpo_ids: Sequence[str], genes: Iterable[Gene]) -> list[GeneScoreResult]:
        scorer = WalkerProximityScorer(self.matrix, self.seed_genes)
        results = []
        for gene in genes:
            score = scorer.score(gene.entrez_gene_id)
            results.append(
                GeneScoreResult(
                    gene_id=gene.entrez_gene_id,
                    gene_symbol=gene.gene_symbol,
                    score=score,
                    prioritiser="EXOMEWALKER",
                    ppi_score=score,
                )
            )
        logger.info(
            "exomewalker_complete",
            genes=len(results),
            genes_in_matrix=sum(1 for g in results if self.matrix.contains_gene(g.gene_id)),
        )
        return rank_results(results)
