"""Command-line interface for the gene analysis platform."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .cli_utils import echo, field, heading, secho, set_quiet_mode, status_label
from .config import Config, create_example_config, get_default_config_path
from .error_handler import AnalysisInProgressError, InputValidationError, PipelineExhaustedError
from .logging_config import setup_logging
from .models import AnalysisResult
from .output_formatter import OutputFormatter, save_export
from .pipeline import AnalysisSession
from .relay import create_app

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ['fasta', 'csv', 'txt', 'json']


def load_config(config_file=None) -> Config:
    """Load the config file (explicit or default location) and merge env vars."""
    config_path = Path(config_file) if config_file else get_default_config_path()
    cfg = Config.from_file(config_path)
    cfg.merge_env_vars()
    return cfg


def render_report(result: AnalysisResult) -> None:
    """Print a finished analysis to the terminal."""
    gene = result.gene

    heading(f"{gene.symbol} (Gene ID: {gene.gene_id})")
    field("Description", gene.description)
    field("Organism", gene.organism)
    field("Chromosome", gene.chromosome)
    field("Location", gene.location)
    field("Aliases", ', '.join(gene.aliases) if gene.aliases else 'None')
    field("Source", gene.identity.source.value)
    echo(f"\n  {gene.function_summary}")

    heading("Sequences")
    genomic = result.sequences.genomic
    if genomic:
        field("Genomic", f"{genomic.accession} ({genomic.kind.value}, {genomic.length_bp} bp)")
    for seq in result.sequences.mrna:
        field("mRNA", f"{seq.accession} ({seq.length_bp} bp)")

    heading(f"Exons ({len(result.exons)})")
    for exon in result.exons[:10]:
        echo(f"  {exon.number:>3}  {exon.exon_id:<20} {exon.start}-{exon.end}  {exon.length} bp  {exon.strand.value}")
    if len(result.exons) > 10:
        echo(f"  ... {len(result.exons) - 10} more")

    heading("Proteins")
    for protein in result.proteins:
        echo(f"  {protein.accession}  {protein.name}  {protein.length_aa} aa  {protein.description}")

    if result.structure is not None:
        heading("Structure")
        field("Status", status_label(result.structure.status))
        if result.structure.coordinate_file_url:
            field("Model", result.structure.coordinate_file_url)

    heading("Stages")
    for outcome in result.outcomes:
        detail = f" ({outcome.message})" if outcome.message else ""
        echo(f"  {outcome.stage:<10} {status_label(outcome.status)}{detail}")


@click.group()
@click.version_option(version=__version__)
def cli():
    """Gene Analysis Platform.

    Look up a human gene across NCBI, Ensembl, UniProt, MyGene.info and
    AlphaFold and export a consolidated report.
    """


@cli.command()
@click.argument('gene')
@click.option('--email', envvar='EMAIL', help='Contact email (required by NCBI)')
@click.option('--output-dir', '-o', type=click.Path(file_okay=False), help='Directory for exported files')
@click.option('--format', 'formats', multiple=True, type=click.Choice(EXPORT_FORMATS),
              help='Export format (repeatable; defaults to the configured formats)')
@click.option('--gateway', 'gateways', multiple=True, help='Relay URL template, e.g. http://host/relay?url={url}')
@click.option('--no-gateway', is_flag=True, help='Never fall back to relays')
@click.option('--api-key', envvar='NCBI_API_KEY', help='NCBI API key for increased rate limits')
@click.option('--config', 'config_file', type=click.Path(exists=True), help='Configuration file path')
@click.option('--log-file', help='Also write logs to this file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress all output except errors')
def analyze(gene, email, output_dir, formats, gateways, no_gateway, api_key, config_file, log_file, verbose, quiet):
    """Analyse GENE (symbol or NCBI Gene ID) and export the report.

    Examples:
        gene-analysis analyze BRCA1 --email you@example.org
        gene-analysis analyze 7157 --email you@example.org --format json
    """
    if quiet and verbose:
        click.echo("Error: Cannot use both --quiet and --verbose", err=True)
        sys.exit(1)

    set_quiet_mode(quiet)
    setup_logging(log_level='DEBUG' if verbose else 'INFO', log_file=log_file, quiet=quiet)

    cfg = load_config(config_file)
    cfg.merge_cli_args(
        api_key=api_key,
        email=email,
        gateways=gateways,
        no_gateway=no_gateway,
        output_dir=output_dir,
        formats=formats
    )

    session = AnalysisSession(cfg)
    try:
        result = session.run(gene, cfg.api.email)
    except InputValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except AnalysisInProgressError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except PipelineExhaustedError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    render_report(result)

    formatter = OutputFormatter()
    echo()
    for fmt in cfg.output.formats:
        try:
            export = formatter.export(result, fmt)
        except ValueError as e:
            secho(f"Skipped {fmt.upper()} export: {e}", fg='yellow')
            continue
        path = save_export(export, cfg.output.directory)
        echo(f"Wrote {path}")

    fallbacks = result.fallback_stages()
    if fallbacks:
        secho(f"Note: placeholder data used for {', '.join(fallbacks)}", fg='yellow')


@cli.command()
@click.option('--host', help='Interface to bind (default from config)')
@click.option('--port', type=int, help='Port to listen on (default from config)')
@click.option('--api-key', envvar='NCBI_API_KEY', help='NCBI API key injected for NCBI targets')
@click.option('--config', 'config_file', type=click.Path(exists=True), help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def relay(host, port, api_key, config_file, verbose):
    """Serve the relay endpoint (GET /relay?url=...)."""
    setup_logging(log_level='DEBUG' if verbose else 'INFO')
    cfg = load_config(config_file)
    cfg.merge_cli_args(api_key=api_key)

    app = create_app(cfg)
    bind_host = host or cfg.relay.host
    bind_port = port or cfg.relay.port
    echo(f"Relay listening on http://{bind_host}:{bind_port}/relay?url=...")
    app.run(host=bind_host, port=bind_port)


@cli.command('generate-config')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Where to write the example config')
def generate_config(output):
    """Write an example configuration file."""
    config_path = create_example_config(Path(output) if output else None)
    echo(f"Generated example configuration file: {config_path}")


if __name__ == '__main__':
    cli()
