"""Phive: mouse-only phenotype prioritisation."""

from typing import Iterable, Optional, Sequence

import structlog

from hiphive_pipeline.config.schema import ExecutionConfig
from hiphive_pipeline.phenotype.matcher import build_phenotype_matcher
from hiphive_pipeline.phenotype.models import Organism
from hiphive_pipeline.phenotype.scorer import ModelScorer
from hiphive_pipeline.prioritisers.aggregation import select_models_to_score
from hiphive_pipeline.prioritisers.errors import EmptyQueryError
from hiphive_pipeline.prioritisers.model_scoring import score_best_models_per_gene
from hiphive_pipeline.prioritisers.results import Gene, GeneScoreResult, rank_results
from hiphive_pipeline.services.base import PriorityService

logger = structlog.get_logger(__name__)

# Genes without any mouse model would otherwise rank below poorly matching
# models, so they get a neutral score instead of 0.
NO_MOUSE_MODEL_SCORE = 0.6


class PhivePrioritiser:
    """Scores mouse knockout models against the query using the HP-MP baseline."""

    def __init__(
        self,
        service: PriorityService,
        execution: Optional[ExecutionConfig] = None,
        nan_scores: str = "skip",
    ):
        self.service = service
        self.execution = execution
        self.nan_scores = nan_scores

    def prioritise(self, hpo_ids: Sequence[str], genes: Iterable[Gene]) -> list[GeneScoreResult]:
        """
        Score genes by their best mouse model.

        Raises:
            EmptyQueryError: If hpo_ids is empty
        """
        if not hpo_ids:
            raise EmptyQueryError("Phive")
        genes = list(genes)
        logger.info("phive_start", query_terms=len(hpo_ids), genes=len(genes))

        query_terms = self.service.make_phenotype_terms(hpo_ids)
        matcher = build_phenotype_matcher(self.service, query_terms, Organism.MOUSE)
        matcher.log_best_matches()
        scorer = ModelScorer.for_single_cross_species(matcher)

        models = select_models_to_score(
            self.service.models_for(Organism.MOUSE),
            {gene.entrez_gene_id for gene in genes},
        )
        genes_with_models = {model.entrez_gene_id for model in models}
        best = score_best_models_per_gene(scorer, models, self.execution, self.nan_scores)

        results = []
        for gene in genes:
            gene_match = best.get(gene.entrez_gene_id)
            if gene_match is not None:
                score = gene_match.score
                evidence = (gene_match,)
            elif gene.entrez_gene_id in genes_with_models:
                score = 0.0
                evidence = ()
            else:
                score = NO_MOUSE_MODEL_SCORE
                evidence = ()
            results.append(
                GeneScoreResult(
                    gene_id=gene.entrez_gene_id,
                    gene_symbol=gene.gene_symbol,
                    score=score,
                    prioritiser="PHIVE",
                    query_phenotype_terms=tuple(query_terms),
                    phenotype_evidence=evidence,
                )
            )
        return rank_results(results)
