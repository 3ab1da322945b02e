"""HiPhive: cross-species phenotype scoring fused with PPI proximity."""

from typing import Iterable, Optional, Sequence

import structlog

from hiphive_pipeline.config.schema import ExecutionConfig, PipelineConfig
from hiphive_pipeline.network.matrix import ProximityMatrix
from hiphive_pipeline.phenotype.matcher import OrganismPhenotypeMatcher, build_phenotype_matcher
from hiphive_pipeline.phenotype.models import GeneModelPhenotypeMatch, Organism, PhenotypeTerm
from hiphive_pipeline.prioritisers.aggregation import make_gene_models_for_organisms
from hiphive_pipeline.prioritisers.errors import EmptyQueryError
from hiphive_pipeline.prioritisers.options import HiPhiveOptions
from hiphive_pipeline.prioritisers.proximity import (
    DEFAULT_HIGH_QUALITY_SCORE_CUTOFF,
    NO_HIT,
    GeneMatch,
    PhenotypeWeightedProximityScorer,
    WalkerProximityScorer,
    best_models_by_organism,
)
from hiphive_pipeline.prioritisers.results import (
    Gene,
    GeneScoreResult,
    fuse_scores,
    max_score,
    rank_results,
)
from hiphive_pipeline.services.base import PriorityService

logger = structlog.get_logger(__name__)


class HiPhivePrioritiser:
    """
    Rank candidate genes by phenotype similarity and PPI proximity.

    Human disease models are always matched first: the human HP-HP self-hit
    baseline normalises mouse and fish scores. PPI scoring is either dynamic
    (seeded by genes with a strong phenotype match) or static (seeded by a
    fixed gene list).
    """

    def __init__(
        self,
        options: HiPhiveOptions,
        matrix: Optional[ProximityMatrix],
        service: PriorityService,
        high_quality_score_cutoff: float = DEFAULT_HIGH_QUALITY_SCORE_CUTOFF,
        ppi_score_offset: float = 0.0,
        ppi_mode: str = "dynamic",
        seed_genes: Sequence[int] = (),
        execution: Optional[ExecutionConfig] = None,
        nan_scores: str = "skip",
    ):
        self.options = options
        self.matrix = matrix if matrix is not None else ProximityMatrix.empty()
        self.service = service
        self.high_quality_score_cutoff = high_quality_score_cutoff
        self.ppi_score_offset = ppi_score_offset
        self.ppi_mode = ppi_mode
        self.seed_genes = list(seed_genes)
        self.execution = execution
        self.nan_scores = nan_scores

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        matrix: Optional[ProximityMatrix],
        service: PriorityService,
    ) -> "HiPhivePrioritiser":
        prioritiser = config.prioritiser
        return cls(
            options=HiPhiveOptions.from_config(prioritiser),
            matrix=matrix,
            service=service,
            high_quality_score_cutoff=prioritiser.high_quality_score_cutoff,
            ppi_score_offset=prioritiser.ppi_score_offset,
            ppi_mode=prioritiser.ppi_mode,
            seed_genes=prioritiser.seed_genes,
            execution=config.execution,
            nan_scores=prioritiser.nan_scores,
        )

    def prioritise(self, hpo_ids: Sequence[str], genes: Iterable[Gene]) -> list[GeneScoreResult]:
        """
        Score and rank genes against the query phenotypes.

        Args:
            hpo_ids: Query HPO term ids
            genes: Candidate genes

        Returns:
            One GeneScoreResult per gene, highest score first

        Raises:
            EmptyQueryError: If hpo_ids is empty
            UnknownPhenotypeTermError: If the service doesn't know a term
        """
        if not hpo_ids:
            raise EmptyQueryError("HiPhive")
        genes = list(genes)

        if self.options.benchmarking_enabled:
            logger.info(
                "benchmarking_mode",
                disease_id=self.options.disease_id,
                candidate_gene=self.options.candidate_gene_symbol,
            )

        query_terms = self.service.make_phenotype_terms(hpo_ids)
        reference, matchers = self._make_phenotype_matchers(query_terms)

        gene_models = make_gene_models_for_organisms(
            matchers,
            reference,
            self.service.models_for,
            {gene.entrez_gene_id for gene in genes},
            exclude=self.options.is_benchmark_hit,
            execution=self.execution,
            nan_scores=self.nan_scores,
        )

        closest_match = self._make_ppi_lookup(gene_models)

        logger.debug("prioritising_genes", genes=len(genes))
        results = [
            self._make_result(gene, query_terms, gene_models.get(gene.entrez_gene_id, []), closest_match(gene.entrez_gene_id))
            for gene in genes
        ]
        return rank_results(results)

    def _make_phenotype_matchers(
        self, query_terms: list[PhenotypeTerm]
    ) -> tuple[OrganismPhenotypeMatcher, list[OrganismPhenotypeMatcher]]:
        # Human always runs first; its baseline is needed by every organism
        reference = build_phenotype_matcher(self.service, query_terms, Organism.HUMAN)
        if not reference.best_phenotype_matches:
            logger.warning(
                "no_human_phenotype_matches",
                query_ids=[t.id for t in query_terms],
            )
        reference.log_best_matches()

        matchers = []
        for organism in self.options.organisms_to_run:
            if organism == Organism.HUMAN:
                matchers.append(reference)
            else:
                matcher = build_phenotype_matcher(self.service, query_terms, organism)
                matcher.log_best_matches()
                matchers.append(matcher)
        return reference, matchers

    def _make_ppi_lookup(self, gene_models: dict[int, list[GeneModelPhenotypeMatch]]):
        if not self.options.run_ppi:
            return lambda gene_id: NO_HIT

        if self.ppi_mode == "static":
            walker = WalkerProximityScorer(self.matrix, self.seed_genes)
            return lambda gene_id: GeneMatch(query_gene_id=gene_id, score=walker.score(gene_id))

        logger.debug("creating_ppi_scorer", genes_with_models=len(gene_models))
        scorer = PhenotypeWeightedProximityScorer(
            self.matrix,
            best_models_by_organism(gene_models, self.options.organisms_to_run),
            self.high_quality_score_cutoff,
            self.ppi_score_offset,
        )
        return scorer.closest_phenotype_match_in_network

    def _make_result(
        self,
        gene: Gene,
        query_terms: list[PhenotypeTerm],
        gene_matches: list[GeneModelPhenotypeMatch],
        closest: GeneMatch,
    ) -> GeneScoreResult:
        phenotype_score = max_score(m.score for m in gene_matches)
        score = fuse_scores(phenotype_score, closest.score)
        logger.debug(
            "gene_result",
            gene_symbol=gene.gene_symbol,
            gene_id=gene.entrez_gene_id,
            score=score,
            phenotype_score=phenotype_score,
            ppi_score=closest.score,
        )
        return GeneScoreResult(
            gene_id=gene.entrez_gene_id,
            gene_symbol=gene.gene_symbol,
            score=score,
            prioritiser="HIPHIVE",
            query_phenotype_terms=tuple(query_terms),
            phenotype_evidence=tuple(gene_matches),
            ppi_evidence=closest.best_match_models,
            ppi_score=closest.score,
            candidate_gene_match=self.options.matches_candidate_gene_symbol(gene.gene_symbol),
            closest_ppi_gene_id=closest.match_gene_id,
        )
