"""Main CLI entry point for hiphive-pipeline.

Provides command group with global options and subcommands for gene
prioritisation runs.
"""

import logging
from pathlib import Path

import click

from hiphive_pipeline import __version__
from hiphive_pipeline.config.loader import load_config
from hiphive_pipeline.cli.prioritise_cmd import prioritise


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to pipeline configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """HiPhive-pipeline: phenotype-driven candidate gene prioritisation.

    Scores candidate genes by semantic similarity between patient HPO terms
    and human disease, mouse and fish models, fused with protein-protein
    interaction proximity to strongly matching genes.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display pipeline information and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"HiPhive Pipeline v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Data Versions:", bold=True))
        click.echo(f"  HPO Release:        {config.versions.hpo_release}")
        click.echo(f"  Phenotype Data:     {config.versions.phenotype_data_version}")
        click.echo(f"  STRING Version:     {config.versions.string_version}")
        click.echo()

        click.echo(click.style("Paths:", bold=True))
        click.echo(f"  Data Directory: {config.data_dir}")
        click.echo(f"  DuckDB Path: {config.duckdb_path}")
        click.echo(f"  Matrix Path: {config.matrix_path or '(none)'}")
        click.echo()

        prioritiser = config.prioritiser
        click.echo(click.style("Prioritiser:", bold=True))
        click.echo(f"  Run Params: {prioritiser.run_params or '(all)'}")
        click.echo(f"  PPI Mode: {prioritiser.ppi_mode}")
        click.echo(f"  High Quality Cutoff: {prioritiser.high_quality_score_cutoff}")
        click.echo(f"  PPI Score Offset: {prioritiser.ppi_score_offset}")
        click.echo(f"  NaN Scores: {prioritiser.nan_scores}")
        if prioritiser.disease_id and prioritiser.candidate_gene_symbol:
            click.echo(
                f"  Benchmark: {prioritiser.disease_id} / {prioritiser.candidate_gene_symbol}"
            )
        click.echo()

        click.echo(click.style("Execution:", bold=True))
        click.echo(f"  Executor: {config.execution.executor}")
        click.echo(f"  Max Workers: {config.execution.max_workers or 'cpu count'}")
        click.echo(f"  Chunk Size: {config.execution.chunk_size}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


# Register commands
cli.add_command(prioritise)


if __name__ == '__main__':
    cli()
