"""Shared synthetic phenotype catalog and interaction matrix for tests."""

import numpy as np
import pytest

from hiphive_pipeline.network.matrix import ProximityMatrix
from hiphive_pipeline.phenotype.models import (
    Gene,
    GeneModel,
    Organism,
    PhenotypeMatch,
    PhenotypeTerm,
)
from hiphive_pipeline.services.base import UnknownPhenotypeTermError


# Query terms
BRACHYDACTYLY = PhenotypeTerm("HP:0001156", "Brachydactyly")
BROAD_THUMB = PhenotypeTerm("HP:0011304", "Broad thumb")
HAND_ABNORMALITY = PhenotypeTerm("HP:0001155", "Abnormality of the hand")

# Mouse and fish terms
SHORT_DIGITS = PhenotypeTerm("MP:0000001", "short digits")
BROAD_DIGIT = PhenotypeTerm("MP:0000002", "broad digit")
ABNORMAL_AUTOPOD = PhenotypeTerm("MP:0000003", "abnormal autopod morphology")
SHORT_FIN = PhenotypeTerm("ZP:0000001", "pectoral fin short")

QUERY_IDS = [BRACHYDACTYLY.id, BROAD_THUMB.id]

FGFR2 = Gene(2263, "FGFR2")
FGFR1 = Gene(2260, "FGFR1")
GENEX = Gene(1111, "GENEX")
GENES = [FGFR2, FGFR1, GENEX]


def match(query, target, score):
    return PhenotypeMatch(query_phenotype=query, match_phenotype=target, score=score)


HUMAN_MATCHES = [
    match(BRACHYDACTYLY, BRACHYDACTYLY, 1.0),
    match(BRACHYDACTYLY, HAND_ABNORMALITY, 0.6),
    match(BROAD_THUMB, BROAD_THUMB, 1.0),
    match(BROAD_THUMB, HAND_ABNORMALITY, 0.4),
]

MOUSE_MATCHES = [
    match(BRACHYDACTYLY, SHORT_DIGITS, 1.0),
    match(BRACHYDACTYLY, ABNORMAL_AUTOPOD, 0.5),
    match(BROAD_THUMB, BROAD_DIGIT, 1.0),
]

FISH_MATCHES = [
    match(BRACHYDACTYLY, SHORT_FIN, 0.8),
]

MATCHES = {
    Organism.HUMAN: HUMAN_MATCHES,
    Organism.MOUSE: MOUSE_MATCHES,
    Organism.FISH: FISH_MATCHES,
}

MODELS = {
    Organism.HUMAN: [
        # Scores 1.0 against the query
        GeneModel("OMIM:1_2263", Organism.HUMAN, 2263, "FGFR2",
                  phenotype_ids=[BRACHYDACTYLY.id, BROAD_THUMB.id],
                  disease_id="OMIM:1", disease_term="Pfeiffer syndrome"),
        # Scores 0.5667
        GeneModel("OMIM:2_2260", Organism.HUMAN, 2260, "FGFR1",
                  phenotype_ids=[HAND_ABNORMALITY.id],
                  disease_id="OMIM:2", disease_term="Hand anomaly"),
    ],
    Organism.MOUSE: [
        # Scores 1.0
        GeneModel("MGI:1", Organism.MOUSE, 2263, "FGFR2",
                  phenotype_ids=[SHORT_DIGITS.id, BROAD_DIGIT.id],
                  model_gene_id="MGI:95523", model_gene_symbol="Fgfr2"),
        # Scores 0.8333
        GeneModel("MGI:3", Organism.MOUSE, 2263, "FGFR2",
                  phenotype_ids=[SHORT_DIGITS.id],
                  model_gene_id="MGI:95523", model_gene_symbol="Fgfr2"),
        # Scores 0.41667
        GeneModel("MGI:2", Organism.MOUSE, 2260, "FGFR1",
                  phenotype_ids=[ABNORMAL_AUTOPOD.id],
                  model_gene_id="MGI:95522", model_gene_symbol="Fgfr1"),
    ],
    Organism.FISH: [
        # Scores 0.6667 against the human baseline
        GeneModel("ZFIN:1", Organism.FISH, 2263, "FGFR2",
                  phenotype_ids=[SHORT_FIN.id],
                  model_gene_id="ZDB-GENE-1", model_gene_symbol="fgfr2"),
    ],
}

ALL_TERMS = [
    BRACHYDACTYLY, BROAD_THUMB, HAND_ABNORMALITY,
    SHORT_DIGITS, BROAD_DIGIT, ABNORMAL_AUTOPOD, SHORT_FIN,
]

MATRIX_GENE_IDS = [2263, 2260, 1111]
MATRIX_VALUES = np.array([
    [0.9, 0.2, 0.3],
    [0.2, 0.9, 0.1],
    [0.3, 0.1, 0.9],
])


class FakePriorityService:
    """In-memory stand-in for the DuckDB service."""

    def __init__(self, matches=None, models=None, terms=None):
        self.matches = matches if matches is not None else MATCHES
        self.models = models if models is not None else MODELS
        self.terms = {t.id: t for t in (terms if terms is not None else ALL_TERMS)}
        self.models_requested = []

    def make_phenotype_terms(self, term_ids):
        missing = [t for t in term_ids if t not in self.terms]
        if missing:
            raise UnknownPhenotypeTermError(missing)
        return [self.terms[t] for t in term_ids]

    def phenotype_matches_for(self, term, organism):
        return {m for m in self.matches.get(organism, []) if m.query_phenotype == term}

    def models_for(self, organism):
        self.models_requested.append(organism)
        return list(self.models.get(organism, []))


@pytest.fixture
def service():
    return FakePriorityService()


@pytest.fixture
def query_terms():
    return [BRACHYDACTYLY, BROAD_THUMB]


@pytest.fixture
def matrix():
    return ProximityMatrix.from_gene_ids(MATRIX_VALUES, MATRIX_GENE_IDS)


@pytest.fixture
def genes():
    return list(GENES)
