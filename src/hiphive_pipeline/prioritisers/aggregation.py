"""Cross-organism aggregation of best models per gene."""

import math
from typing import Callable, Iterable, Optional, Sequence

import structlog

from hiphive_pipeline.config.schema import ExecutionConfig
from hiphive_pipeline.phenotype.matcher import OrganismPhenotypeMatcher
from hiphive_pipeline.phenotype.models import GeneModel, GeneModelPhenotypeMatch, Organism
from hiphive_pipeline.phenotype.scorer import ModelScorer
from hiphive_pipeline.prioritisers.model_scoring import score_best_models_per_gene

logger = structlog.get_logger(__name__)


def select_models_to_score(
    models: Iterable[GeneModel],
    wanted_gene_ids: set[int],
    exclude: Optional[Callable[[GeneModel], bool]] = None,
) -> list[GeneModel]:
    """
    Keep models of wanted genes, dropping any the exclude predicate matches.

    exclude is the benchmark filter: it removes the known answer before
    scoring so it can never contribute to a gene's score.
    """
    selected = []
    excluded = 0
    for model in models:
        if exclude is not None and exclude(model):
            excluded += 1
            continue
        if model.entrez_gene_id in wanted_gene_ids:
            selected.append(model)
    if excluded:
        logger.info("benchmark_models_excluded", models=excluded)
    return selected


def make_gene_models_for_organisms(
    matchers: Sequence[OrganismPhenotypeMatcher],
    reference: OrganismPhenotypeMatcher,
    models_for: Callable[[Organism], Iterable[GeneModel]],
    wanted_gene_ids: set[int],
    exclude: Optional[Callable[[GeneModel], bool]] = None,
    execution: Optional[ExecutionConfig] = None,
    nan_scores: str = "skip",
) -> dict[int, list[GeneModelPhenotypeMatch]]:
    """
    Score each organism's models and merge the best model per gene.

    The reference (human HP-HP) matcher must already be built: its baseline
    normalises every organism so scores are comparable across species.
    Organisms are processed in the order of matchers.

    Args:
        matchers: One matcher per enabled organism, in scoring order
        reference: Human matcher providing the multi-cross-species baseline
        models_for: Callable returning all models for an organism
        wanted_gene_ids: Entrez ids of the candidate genes
        exclude: Optional predicate removing benchmark models
        execution: Worker pool settings
        nan_scores: NaN score policy passed to the reducer

    Returns:
        Dict of Entrez gene id to its best models, at most one per organism
    """
    gene_models: dict[int, list[GeneModelPhenotypeMatch]] = {}
    for matcher in matchers:
        scorer = ModelScorer.for_multi_cross_species(reference.query_phenotype_match, matcher)
        models = select_models_to_score(models_for(matcher.organism), wanted_gene_ids, exclude)
        best = score_best_models_per_gene(scorer, models, execution, nan_scores)
        for gene_id, gene_match in best.items():
            if gene_match.score > 0 or math.isnan(gene_match.score):
                gene_models.setdefault(gene_id, []).append(gene_match)

    logger.info(
        "gene_models_aggregated",
        organisms=[m.organism.value for m in matchers],
        genes=len(gene_models),
    )
    return gene_models
