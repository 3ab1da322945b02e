"""Value types for phenotype terms, matches and gene/disease models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Organism(str, Enum):
    """Organisms whose models can be scored. Order is the scoring order."""

    HUMAN = "HUMAN"
    MOUSE = "MOUSE"
    FISH = "FISH"

    @property
    def run_param(self) -> str:
        """Token used for this organism in a run_params string."""
        return self.value.lower()


@dataclass(frozen=True)
class PhenotypeTerm:
    """Ontology phenotype term. Equality is by id only."""

    id: str
    label: str = field(default="", compare=False)

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class PhenotypeMatch:
    """Similarity between a query term and a term from a target organism's ontology.

    Attributes:
        query_phenotype: Query (HP) term
        match_phenotype: Matched HP, MP or ZP term
        score: Similarity score used for all model scoring (>= 0)
        simj: Jaccard similarity of the two terms' ancestor sets
        ic: Information content of the lowest common subsumer
        lcs: Lowest common subsumer term, if known
    """

    query_phenotype: PhenotypeTerm
    match_phenotype: PhenotypeTerm
    score: float
    simj: float = 0.0
    ic: float = 0.0
    lcs: Optional[PhenotypeTerm] = None

    @property
    def query_phenotype_id(self) -> str:
        return self.query_phenotype.id

    @property
    def match_phenotype_id(self) -> str:
        return self.match_phenotype.id


@dataclass(frozen=True)
class GeneModel:
    """Phenotype annotation bundle for a gene in one organism.

    A human model is a disease (model_id like ``OMIM:101600_2263``); mouse and
    fish models are knockouts. Identity is (organism, model_id), so a gene can
    carry several models.
    """

    model_id: str
    organism: Organism
    entrez_gene_id: int
    human_gene_symbol: str
    phenotype_ids: tuple[str, ...] = field(default=(), compare=False)
    model_gene_id: str = field(default="", compare=False)
    model_gene_symbol: str = field(default="", compare=False)
    disease_id: str = field(default="", compare=False)
    disease_term: str = field(default="", compare=False)

    def __post_init__(self):
        # Accept any iterable of ids but store an immutable tuple
        object.__setattr__(self, "phenotype_ids", tuple(self.phenotype_ids))


@dataclass(frozen=True)
class ModelPhenotypeMatch:
    """A scored model and the phenotype matches that produced the score."""

    score: float
    model: GeneModel
    best_phenotype_matches: tuple[PhenotypeMatch, ...] = ()

    @property
    def entrez_gene_id(self) -> int:
        return self.model.entrez_gene_id

    @property
    def model_id(self) -> str:
        return self.model.model_id


@dataclass(frozen=True)
class GeneModelPhenotypeMatch:
    """The best scoring model for one gene in one organism."""

    score: float
    model: GeneModel
    best_phenotype_matches: tuple[PhenotypeMatch, ...] = ()

    @classmethod
    def from_model_phenotype_match(
        cls, match: ModelPhenotypeMatch
    ) -> "GeneModelPhenotypeMatch":
        return cls(
            score=match.score,
            model=match.model,
            best_phenotype_matches=match.best_phenotype_matches,
        )

    @property
    def entrez_gene_id(self) -> int:
        return self.model.entrez_gene_id

    @property
    def human_gene_symbol(self) -> str:
        return self.model.human_gene_symbol

    @property
    def organism(self) -> Organism:
        return self.model.organism

    @property
    def model_id(self) -> str:
        return self.model.model_id


@dataclass(frozen=True)
class Gene:
    """A candidate gene to prioritise."""

    entrez_gene_id: int
    gene_symbol: str
