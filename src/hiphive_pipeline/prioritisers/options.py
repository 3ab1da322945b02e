"""Runtime options for a HiPhive run, derived from PrioritiserConfig."""

from dataclasses import dataclass, field

from hiphive_pipeline.config.schema import (
    PrioritiserConfig,
    RUN_PARAMETERS,
    parse_run_params,
)
from hiphive_pipeline.phenotype.models import GeneModel, Organism


@dataclass(frozen=True)
class HiPhiveOptions:
    """
    Which organisms to score, whether to run PPI, and the benchmark pair.

    Benchmarking hides the models of a known (disease, gene) answer and is
    enabled only when both disease_id and candidate_gene_symbol are set.
    """

    disease_id: str = ""
    candidate_gene_symbol: str = ""
    run_params: frozenset[str] = field(default_factory=lambda: frozenset(RUN_PARAMETERS))

    @classmethod
    def from_run_params(
        cls,
        run_params: str = "",
        disease_id: str = "",
        candidate_gene_symbol: str = "",
    ) -> "HiPhiveOptions":
        """
        Build options from a run_params string such as 'human,mouse,ppi'.

        Raises:
            InvalidRunParameterError: If run_params holds an unknown token
        """
        return cls(
            disease_id=disease_id or "",
            candidate_gene_symbol=candidate_gene_symbol or "",
            run_params=parse_run_params(run_params),
        )

    @classmethod
    def from_config(cls, config: PrioritiserConfig) -> "HiPhiveOptions":
        return cls.from_run_params(
            config.run_params, config.disease_id, config.candidate_gene_symbol
        )

    @property
    def organisms_to_run(self) -> list[Organism]:
        """Enabled organisms in scoring order (human first)."""
        return [org for org in Organism if org.run_param in self.run_params]

    @property
    def run_ppi(self) -> bool:
        return "ppi" in self.run_params

    @property
    def benchmarking_enabled(self) -> bool:
        return bool(self.disease_id) and bool(self.candidate_gene_symbol)

    def is_benchmark_hit(self, model: GeneModel) -> bool:
        """True if the model is the known answer the benchmark should hide."""
        if not self.benchmarking_enabled:
            return False
        disease_id = model.disease_id or model.model_id.split("_")[0]
        return (
            disease_id == self.disease_id
            and model.human_gene_symbol == self.candidate_gene_symbol
        )

    def matches_candidate_gene_symbol(self, gene_symbol: str) -> bool:
        """
        True if the symbol is the candidate gene.

        Symbols of merged loci look like 'FGFR2,FGFR3', so a symbol starting
        with '<candidate>,' also counts.
        """
        if not self.candidate_gene_symbol:
            return False
        return gene_symbol == self.candidate_gene_symbol or gene_symbol.startswith(
            self.candidate_gene_symbol + ","
        )
