"""Prioritise command: rank candidate genes for a set of HPO terms.

Runs one of the HiPhive, Phive or ExomeWalker prioritisers against the
DuckDB phenotype catalog and the random-walk proximity matrix, prints the
top of the ranking and optionally persists it with provenance.
"""

import logging
import sys
from pathlib import Path

import click
import polars as pl

from hiphive_pipeline.config.loader import load_config_with_overrides
from hiphive_pipeline.network.matrix import load_proximity_matrix
from hiphive_pipeline.output.results import RESULTS_TABLE_NAME, save_results
from hiphive_pipeline.persistence import PipelineStore, ProvenanceTracker
from hiphive_pipeline.phenotype.models import Gene
from hiphive_pipeline.prioritisers import (
    EmptyQueryError,
    ExomeWalkerPrioritiser,
    HiPhiveOptions,
    HiPhivePrioritiser,
    PhivePrioritiser,
)
from hiphive_pipeline.services import DuckDBPriorityService, UnknownPhenotypeTermError

logger = logging.getLogger(__name__)


def read_genes(genes_path: Path) -> list[Gene]:
    """
    Read candidate genes from a TSV with columns entrez_id and gene_symbol.

    Raises:
        ValueError: If either column is missing
    """
    df = pl.read_csv(genes_path, separator="\t")
    missing = {"entrez_id", "gene_symbol"} - set(df.columns)
    if missing:
        raise ValueError(f"Genes file {genes_path} missing columns: {', '.join(sorted(missing))}")
    return [
        Gene(entrez_gene_id=int(row["entrez_id"]), gene_symbol=str(row["gene_symbol"]))
        for row in df.iter_rows(named=True)
    ]


@click.command('prioritise')
@click.option(
    '--hpo', 'hpo_ids',
    multiple=True,
    required=True,
    help='Query HPO term id (repeat for each term), e.g. --hpo HP:0001156'
)
@click.option(
    '--genes', 'genes_path',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='TSV of candidate genes (entrez_id, gene_symbol). Default: every gene with a model'
)
@click.option(
    '--prioritiser', 'prioritiser_name',
    type=click.Choice(['hiphive', 'phive', 'exomewalker']),
    default='hiphive',
    show_default=True,
    help='Prioritiser to run'
)
@click.option('--run-params', default=None, help='Override prioritiser.run_params, e.g. "human,mouse,ppi"')
@click.option('--disease-id', default=None, help='Benchmark disease id to hide')
@click.option('--candidate-gene', default=None, help='Benchmark candidate gene symbol')
@click.option('--top', default=20, show_default=True, help='Number of ranked genes to print')
@click.option('--persist', is_flag=True, help='Save the ranking to DuckDB with a provenance sidecar')
@click.pass_context
def prioritise(ctx, hpo_ids, genes_path, prioritiser_name, run_params, disease_id,
               candidate_gene, top, persist):
    """Rank candidate genes by phenotype similarity and PPI proximity.

    Examples:

        # HiPhive with all organisms and PPI
        hiphive-pipeline prioritise --hpo HP:0001156 --hpo HP:0011304

        # Human and mouse only, restricted to a gene list
        hiphive-pipeline prioritise --hpo HP:0001156 --run-params human,mouse --genes genes.tsv

        # Benchmark: hide the known disease-gene answer
        hiphive-pipeline prioritise --hpo HP:0001156 --disease-id OMIM:101600 --candidate-gene FGFR2
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style(f"=== {prioritiser_name.upper()} Prioritisation ===", bold=True))
    click.echo()

    store = None
    try:
        click.echo("Loading configuration...")
        config = load_config_with_overrides(config_path, {
            'prioritiser.run_params': run_params,
            'prioritiser.disease_id': disease_id,
            'prioritiser.candidate_gene_symbol': candidate_gene,
        })
        click.echo(click.style(f"  Config loaded: {config_path}", fg='green'))
        click.echo()

        options = HiPhiveOptions.from_config(config.prioritiser)
        needs_matrix = prioritiser_name == 'exomewalker' or (
            prioritiser_name == 'hiphive' and options.run_ppi
        )

        matrix = None
        if needs_matrix:
            if config.matrix_path is None:
                click.echo(click.style(
                    "PPI scoring requested but no matrix_path is configured", fg='red'
                ), err=True)
                sys.exit(1)
            click.echo("Loading proximity matrix...")
            matrix = load_proximity_matrix(config.matrix_path)
            click.echo(click.style(f"  {matrix.num_rows} genes in matrix", fg='green'))
            click.echo()

        store = PipelineStore.from_config(config)
        provenance = ProvenanceTracker.from_config(config)
        service = DuckDBPriorityService(store)

        if genes_path is not None:
            genes = read_genes(genes_path)
        else:
            genes = service.all_genes()
        click.echo(f"Candidate genes: {len(genes)}")
        click.echo(f"Query terms: {', '.join(hpo_ids)}")
        click.echo()

        if prioritiser_name == 'hiphive':
            prioritiser = HiPhivePrioritiser.from_config(config, matrix, service)
        elif prioritiser_name == 'phive':
            prioritiser = PhivePrioritiser(
                service, config.execution, config.prioritiser.nan_scores
            )
        else:
            prioritiser = ExomeWalkerPrioritiser(matrix, config.prioritiser.seed_genes)

        click.echo("Scoring genes...")
        results = prioritiser.prioritise(list(hpo_ids), genes)
        provenance.record_step('prioritise', {
            'prioritiser': prioritiser_name,
            'hpo_ids': list(hpo_ids),
            'genes': len(genes),
            'run_params': config.prioritiser.run_params,
        })
        click.echo(click.style(f"  Scored {len(results)} genes", fg='green'))
        click.echo()

        click.echo(click.style(f"=== Top {min(top, len(results))} ===", bold=True))
        for rank, result in enumerate(results[:top], start=1):
            marker = " *" if result.candidate_gene_match else ""
            click.echo(
                f"{rank:>4}  {result.gene_symbol:<12} {result.score:.4f}  "
                f"(pheno={result.phenotype_score:.4f} ppi={result.ppi_score:.4f}){marker}"
            )
        click.echo()

        if persist:
            click.echo("Saving results...")
            save_results(store, results, run_id=provenance.run_id)
            provenance.save_to_store(store)
            sidecar = provenance.save_sidecar(
                config.data_dir / f"{RESULTS_TABLE_NAME}_{provenance.run_id}.json"
            )
            click.echo(click.style(f"  Saved to {RESULTS_TABLE_NAME} (run {provenance.run_id})", fg='green'))
            click.echo(click.style(f"  Provenance: {sidecar}", fg='green'))
            click.echo()

        click.echo(click.style("Prioritisation complete", fg='green', bold=True))

    except (EmptyQueryError, UnknownPhenotypeTermError, ValueError, FileNotFoundError) as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        logger.exception("Prioritisation failed")
        sys.exit(1)
    finally:
        if store is not None:
            store.close()
