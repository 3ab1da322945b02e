"""Parallel model scoring reduced to the best model per gene."""

import math
import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import structlog

from hiphive_pipeline.config.schema import ExecutionConfig
from hiphive_pipeline.phenotype.models import (
    GeneModel,
    GeneModelPhenotypeMatch,
    ModelPhenotypeMatch,
)
from hiphive_pipeline.phenotype.scorer import ModelScorer

logger = structlog.get_logger(__name__)


@dataclass
class ChunkResult:
    """Best model per gene for one chunk plus the models that were dropped."""

    best: dict[int, ModelPhenotypeMatch] = field(default_factory=dict)
    scored: int = 0
    nan_model_ids: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


def _rank_key(match: ModelPhenotypeMatch) -> tuple[float, str]:
    # Lower key ranks first: higher score, then lower model id. NaN ranks last.
    score = match.score
    if math.isnan(score):
        score = -math.inf
    return (-score, match.model_id)


def keep_best(best: dict[int, ModelPhenotypeMatch], match: ModelPhenotypeMatch) -> None:
    """Keep match if it beats the current best for its gene."""
    current = best.get(match.entrez_gene_id)
    if current is None or _rank_key(match) < _rank_key(current):
        best[match.entrez_gene_id] = match


def best_model_per_gene(
    matches: Iterable[ModelPhenotypeMatch],
) -> dict[int, ModelPhenotypeMatch]:
    """Reduce scored models to the best one per Entrez gene id."""
    best: dict[int, ModelPhenotypeMatch] = {}
    for match in matches:
        keep_best(best, match)
    return best


def merge_best_models(
    target: dict[int, ModelPhenotypeMatch],
    other: dict[int, ModelPhenotypeMatch],
) -> dict[int, ModelPhenotypeMatch]:
    """Merge two best-per-gene maps in place into target. Order independent."""
    for match in other.values():
        keep_best(target, match)
    return target


def _score_chunk(
    scorer: ModelScorer,
    models: Sequence[GeneModel],
    nan_scores: str = "skip",
) -> ChunkResult:
    """Score a chunk of models and reduce it to best-per-gene.

    Runs inside worker processes, so it must stay at module level.
    """
    result = ChunkResult()
    for model in models:
        try:
            match = scorer.score_model(model)
        except (ArithmeticError, ValueError) as e:
            result.failed.append((model.model_id, str(e)))
            continue
        if match is None:
            continue
        result.scored += 1
        if math.isnan(match.score):
            result.nan_model_ids.append(model.model_id)
            if nan_scores == "skip":
                continue
        keep_best(result.best, match)
    return result


def _chunks(models: Sequence[GeneModel], chunk_size: int) -> list[list[GeneModel]]:
    return [list(models[i:i + chunk_size]) for i in range(0, len(models), chunk_size)]


def _make_executor(execution: ExecutionConfig):
    if execution.executor == "thread":
        return ThreadPoolExecutor(max_workers=execution.max_workers)
    return ProcessPoolExecutor(max_workers=execution.max_workers)


def score_best_models_per_gene(
    scorer: ModelScorer,
    models: Iterable[GeneModel],
    execution: Optional[ExecutionConfig] = None,
    nan_scores: str = "skip",
) -> dict[int, GeneModelPhenotypeMatch]:
    """
    Score every model and keep the best scoring model per gene.

    Models are sorted by (gene id, model id) and split into chunks. Each
    chunk is scored and reduced to best-per-gene inside a worker, then the
    chunk results are merged with the same rule: higher score wins, then the
    lower model id. The result therefore does not depend on worker count or
    completion order.

    Models that fail to score with an ArithmeticError or ValueError are
    logged and skipped. Models scoring NaN are logged at ERROR and either
    skipped or kept according to nan_scores.

    Args:
        scorer: ModelScorer for the models' organism
        models: Models to score
        execution: Worker pool settings (default: inline, one worker)
        nan_scores: 'skip' or 'propagate'

    Returns:
        Dict mapping Entrez gene id to GeneModelPhenotypeMatch
    """
    execution = execution or ExecutionConfig(max_workers=1)
    ordered = sorted(models, key=lambda m: (m.entrez_gene_id, m.model_id))
    chunks = _chunks(ordered, execution.chunk_size)

    start = time.perf_counter()
    logger.info(
        "score_models_start",
        organism=scorer.organism.value,
        models=len(ordered),
        chunks=len(chunks),
        executor=execution.executor,
    )

    results: list[ChunkResult] = []
    if execution.max_workers == 1 or len(chunks) <= 1:
        results = [_score_chunk(scorer, chunk, nan_scores) for chunk in chunks]
    else:
        with _make_executor(execution) as executor:
            futures = [
                executor.submit(_score_chunk, scorer, chunk, nan_scores)
                for chunk in chunks
            ]
            for future in as_completed(futures):
                results.append(future.result())

    best: dict[int, ModelPhenotypeMatch] = {}
    scored = 0
    for chunk_result in results:
        scored += chunk_result.scored
        for model_id, reason in chunk_result.failed:
            logger.warning("model_scoring_failed", model_id=model_id, error=reason)
        for model_id in chunk_result.nan_model_ids:
            logger.error(
                "model_score_nan",
                organism=scorer.organism.value,
                model_id=model_id,
                policy=nan_scores,
            )
        merge_best_models(best, chunk_result.best)

    duration_ms = round((time.perf_counter() - start) * 1000, 1)
    logger.info(
        "score_models_complete",
        organism=scorer.organism.value,
        models=len(ordered),
        scored=scored,
        genes=len(best),
        duration_ms=duration_ms,
    )

    return {
        gene_id: GeneModelPhenotypeMatch.from_model_phenotype_match(match)
        for gene_id, match in sorted(best.items())
    }
