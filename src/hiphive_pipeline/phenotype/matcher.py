"""Per-organism phenotype matcher: forward and reciprocal best-hit scoring."""

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import structlog

from hiphive_pipeline.phenotype.models import Organism, PhenotypeMatch, PhenotypeTerm
from hiphive_pipeline.phenotype.query import QueryPhenotypeMatch, best_match, match_sort_key

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RawModelScore:
    """Un-normalised result of matching one model's phenotypes against a query.

    Attributes:
        max_model_match_score: Highest best-hit score from either pass
        sum_model_best_match_scores: Sum of forward and reciprocal best hits
        matching_phenotypes: Model phenotype ids with a match to any query term
        best_phenotype_matches: Best contributing match per query term
    """

    max_model_match_score: float
    sum_model_best_match_scores: float
    matching_phenotypes: tuple[str, ...]
    best_phenotype_matches: tuple[PhenotypeMatch, ...]


def _is_better(match: PhenotypeMatch, current: PhenotypeMatch) -> bool:
    return match_sort_key(match) < match_sort_key(current)


class OrganismPhenotypeMatcher:
    """
    Scores model phenotype annotations against the query for one organism.

    Built from a QueryPhenotypeMatch. All lookups are precomputed in the
    constructor so match_phenotype_ids is a pure function of its argument and
    the matcher can be shared by parallel workers.
    """

    def __init__(self, query_phenotype_match: QueryPhenotypeMatch):
        self.query_phenotype_match = query_phenotype_match

        term_matches = query_phenotype_match.query_term_phenotype_matches
        self._matched_organism_phenotype_ids = frozenset(
            match.match_phenotype_id
            for matches in term_matches.values()
            for match in matches
        )
        self._matched_query_phenotype_ids = sorted(
            {match.query_phenotype_id for match in query_phenotype_match.best_phenotype_matches}
        )
        # (query id, match id) -> match
        self._mapped_terms: dict[tuple[str, str], PhenotypeMatch] = {
            (match.query_phenotype_id, match.match_phenotype_id): match
            for matches in term_matches.values()
            for match in matches
        }

    @property
    def organism(self) -> Organism:
        return self.query_phenotype_match.organism

    @property
    def query_terms(self) -> list[PhenotypeTerm]:
        return self.query_phenotype_match.query_terms

    @property
    def best_phenotype_matches(self) -> tuple[PhenotypeMatch, ...]:
        return self.query_phenotype_match.best_phenotype_matches

    def log_best_matches(self) -> None:
        """Log the best match for each query term and the baselines at DEBUG."""
        term_matches = self.query_phenotype_match.query_term_phenotype_matches
        for term, matches in term_matches.items():
            if not matches:
                logger.debug(
                    "best_phenotype_match",
                    organism=self.organism.value,
                    query_id=term.id,
                    match="NOT MATCHED",
                )
                continue
            best = best_match(matches)
            logger.debug(
                "best_phenotype_match",
                organism=self.organism.value,
                query_id=term.id,
                match=best.match_phenotype_id,
                score=best.score,
            )
        logger.debug(
            "phenotype_baselines",
            organism=self.organism.value,
            best_max_score=self.query_phenotype_match.max_match_score,
            best_avg_score=self.query_phenotype_match.best_avg_score,
        )

    def match_phenotype_ids(self, model_phenotype_ids: Sequence[str]) -> RawModelScore:
        """
        Compute forward and reciprocal best hits for a model's phenotypes.

        The forward pass takes, for each matched query term, the best hit among
        the model's matched phenotypes. The reciprocal pass takes, for each
        matched model phenotype, the best hit among the query terms. Both
        passes add into the same sum and max. Any NaN pair score makes both
        the sum and the max NaN.

        Args:
            model_phenotype_ids: HP, MP or ZP ids annotated to the model

        Returns:
            RawModelScore with the accumulated sum, max and contributing matches
        """
        matched_model_ids = [
            pid for pid in model_phenotype_ids
            if pid in self._matched_organism_phenotype_ids
        ]

        max_score = 0.0
        sum_scores = 0.0
        best_for_terms: dict[str, PhenotypeMatch] = {}

        forward = (
            (query_id, [(query_id, model_id) for model_id in matched_model_ids])
            for query_id in self._matched_query_phenotype_ids
        )
        reciprocal = (
            (model_id, [(query_id, model_id) for query_id in self._matched_query_phenotype_ids])
            for model_id in matched_model_ids
        )

        has_nan = False
        for pass_pairs in (forward, reciprocal):
            for _, pairs in pass_pairs:
                best_score = 0.0
                for key in pairs:
                    match = self._mapped_terms.get(key)
                    if match is None:
                        continue
                    if math.isnan(match.score):
                        has_nan = True
                        continue
                    best_score = max(best_score, match.score)
                    if match.score > 0:
                        self._keep_best(match, best_for_terms)
                if best_score > 0:
                    sum_scores += best_score
                    max_score = max(max_score, best_score)

        # A NaN pair score makes the whole model score NaN
        if has_nan:
            logger.debug("nan_phenotype_match_score", model_phenotype_ids=list(matched_model_ids))
            max_score = math.nan
            sum_scores = math.nan

        return RawModelScore(
            max_model_match_score=max_score,
            sum_model_best_match_scores=sum_scores,
            matching_phenotypes=tuple(matched_model_ids),
            best_phenotype_matches=tuple(best_for_terms.values()),
        )

    @staticmethod
    def _keep_best(match: PhenotypeMatch, best_for_terms: dict[str, PhenotypeMatch]) -> None:
        current = best_for_terms.get(match.query_phenotype_id)
        if current is None or _is_better(match, current):
            best_for_terms[match.query_phenotype_id] = match

    def __repr__(self) -> str:
        return f"OrganismPhenotypeMatcher({self.query_phenotype_match!r})"


def build_phenotype_matcher(
    service,
    query_terms: Iterable[PhenotypeTerm],
    organism: Organism,
) -> OrganismPhenotypeMatcher:
    """
    Fetch matches for every query term from the service and build a matcher.

    Args:
        service: Object with phenotype_matches_for(term, organism)
        query_terms: Query phenotype terms in input order
        organism: Target organism

    Returns:
        OrganismPhenotypeMatcher for the organism
    """
    query_term_matches = {
        term: service.phenotype_matches_for(term, organism) for term in query_terms
    }
    matcher = OrganismPhenotypeMatcher(QueryPhenotypeMatch(organism, query_term_matches))
    logger.info(
        "phenotype_matcher_built",
        organism=organism.value,
        query_terms=len(query_term_matches),
        matched_terms=len(matcher.best_phenotype_matches),
    )
    return matcher
