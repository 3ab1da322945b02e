"""Collaborator contracts consumed by the prioritisers."""

from typing import Iterable, Protocol, Sequence

from hiphive_pipeline.phenotype.models import GeneModel, Organism, PhenotypeMatch, PhenotypeTerm


class UnknownPhenotypeTermError(KeyError):
    """Raised when a query phenotype id is not in the term catalog."""

    def __init__(self, term_ids: Sequence[str]):
        self.term_ids = list(term_ids)
        super().__init__(f"Unknown phenotype term(s): {', '.join(self.term_ids)}")

    def __str__(self) -> str:
        return self.args[0]


class PhenotypeMatchService(Protocol):
    """Ontology similarity lookups, precomputed per query term and organism."""

    def make_phenotype_terms(self, term_ids: Iterable[str]) -> list[PhenotypeTerm]:
        ...

    def phenotype_matches_for(
        self, term: PhenotypeTerm, organism: Organism
    ) -> set[PhenotypeMatch]:
        ...


class ModelCatalogService(Protocol):
    """Disease and knockout models per organism."""

    def models_for(self, organism: Organism) -> list[GeneModel]:
        ...


class PriorityService(PhenotypeMatchService, ModelCatalogService, Protocol):
    """Everything a phenotype prioritiser needs from the data layer."""
