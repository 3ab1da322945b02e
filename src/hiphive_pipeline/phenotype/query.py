"""Best self-hit matches and normalisation baselines for a query."""

import math
from typing import Iterable, Mapping, Optional

from hiphive_pipeline.phenotype.models import Organism, PhenotypeMatch, PhenotypeTerm


def match_sort_key(match: PhenotypeMatch) -> tuple[bool, float, str]:
    """
    Sort key putting the best match first.

    A NaN score outranks any number so it is never lost to iteration order.
    Equal scores go to the lower match id.
    """
    if math.isnan(match.score):
        return (False, 0.0, match.match_phenotype_id)
    return (True, -match.score, match.match_phenotype_id)


def best_match(matches: Iterable[PhenotypeMatch]) -> Optional[PhenotypeMatch]:
    """
    Pick the highest scoring match, preferring the lower match id on ties.

    Returns None for an empty iterable.
    """
    return min(matches, key=match_sort_key, default=None)


class QueryPhenotypeMatch:
    """
    Query terms matched against one organism's ontology.

    Holds every candidate match per query term and the single best match per
    term. The two baselines, max_match_score and best_avg_score, are computed
    once here and used to normalise every model scored against the organism.
    """

    def __init__(
        self,
        organism: Organism,
        query_term_matches: Mapping[PhenotypeTerm, Iterable[PhenotypeMatch]],
    ):
        self.organism = organism
        self.query_term_phenotype_matches: dict[PhenotypeTerm, frozenset[PhenotypeMatch]] = {
            term: frozenset(matches) for term, matches in query_term_matches.items()
        }
        self.query_terms: list[PhenotypeTerm] = list(self.query_term_phenotype_matches)

        best_matches = []
        for matches in self.query_term_phenotype_matches.values():
            selected = best_match(matches)
            # Unmatched query terms are dropped but still count in the average
            if selected is not None:
                best_matches.append(selected)
        self.best_phenotype_matches: tuple[PhenotypeMatch, ...] = tuple(best_matches)

        scores = [match.score for match in best_matches]
        if any(math.isnan(score) for score in scores):
            self.max_match_score: float = math.nan
        else:
            self.max_match_score = max(scores, default=0.0)
        if self.query_terms:
            self.best_avg_score: float = sum(scores) / len(self.query_terms)
        else:
            self.best_avg_score = 0.0

    def __repr__(self) -> str:
        return (
            f"QueryPhenotypeMatch(organism={self.organism.value}, "
            f"query_terms={len(self.query_terms)}, "
            f"max_match_score={self.max_match_score}, "
            f"best_avg_score={self.best_avg_score})"
        )
