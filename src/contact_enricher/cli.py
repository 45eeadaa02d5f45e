"""
Command Line Interface for Contact Enricher.
Provides CLI commands for enriching CSV files, reporting completion statistics and checking configuration.
"""

import logging
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn
from rich.panel import Panel

from .config import get_config, reload_config
from .clients import GeminiClient, build_discovery_client
from .enrichment import (
    ContactExtractor,
    EnrichmentPipeline,
    PipelineObserver,
    PipelineStatus,
    ResultAggregator,
    RowEnricher,
)
from .errors import ConfigurationError, EnrichmentError, InvalidTransitionError
from .tabular import read_table, write_table


# Initialize console for rich output
console = Console()
logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", log_dir: str = "logs"):
    """Setup logging configuration."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_path / "enricher.log"),
            logging.StreamHandler()
        ]
    )


class RichProgressObserver(PipelineObserver):
    """Mirrors pipeline progress onto a rich progress bar."""

    def __init__(self, progress: Progress, task_id):
        self.progress = progress
        self.task_id = task_id

    def on_progress(self, update):
        self.progress.update(
            self.task_id,
            completed=update.current_row,
            description=f"{update.state}: row {update.current_row}/{update.total_rows} ({update.success_count} enriched)",
        )


def build_pipeline(table, config, entity_column=None, observers=None) -> EnrichmentPipeline:
    """Wire the configured clients into a pipeline for a table."""
    discovery_client = build_discovery_client(config)
    extractor = ContactExtractor(GeminiClient(config), config)
    row_enricher = RowEnricher(discovery_client, extractor)
    return EnrichmentPipeline(
        table,
        row_enricher,
        config=config,
        observers=observers,
        entity_column=entity_column,
    )


def print_statistics(original, processed):
    """Render completion statistics as a table."""
    stats = ResultAggregator().aggregate(original, processed)

    table = Table(title="Enrichment Statistics")
    table.add_column("Field", style="cyan")
    table.add_column("Populated", style="green", justify="right")
    table.add_column("Percentage", style="yellow", justify="right")

    for stat in stats.field_stats:
        table.add_row(stat.field, str(stat.populated), f"{stat.percentage:.0f}%")

    console.print(table)
    console.print(f"Overall completion: [bold]{stats.overall_completion:.0f}%[/bold]")
    console.print(f"Rows changed: [bold]{stats.changed_count}[/bold] of {stats.total_rows}")


@click.group()
@click.option('--config', '-c', help='Configuration file path')
@click.option('--log-level', default=None, help='Logging level')
@click.pass_context
def cli(ctx, config, log_level):
    """Contact Enricher - fill in contact details for every row of a CSV"""
    ctx.ensure_object(dict)

    try:
        if config:
            ctx.obj['config'] = reload_config(config)
        else:
            ctx.obj['config'] = get_config()
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    app_config = ctx.obj['config'].app
    setup_logging(log_level or app_config.log_level, app_config.log_dir)

    console.print(Panel.fit(
        "[bold blue]Contact Enricher[/bold blue]\n"
        "Web discovery + AI extraction of contact details",
        border_style="blue"
    ))


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('output_file', type=click.Path(dir_okay=False))
@click.option('--column', help='Column holding entity names (detected when omitted)')
@click.option('--delay', type=float, help='Seconds to wait between rows')
@click.option('--provider', type=click.Choice(['firecrawl', 'direct']), help='Discovery provider')
@click.pass_context
def enrich(ctx, input_file, output_file, column, delay, provider):
    """Enrich INPUT_FILE and write the result to OUTPUT_FILE"""

    config = ctx.obj['config']
    if delay is not None:
        config = replace(config, pipeline=replace(config.pipeline, row_delay=delay))
    if provider:
        config = replace(config, discovery=replace(config.discovery, provider=provider))

    table = read_table(input_file)
    if not table:
        console.print("[red]No data to process[/red]")
        ctx.exit(1)

    console.print(f"[green]Loaded {len(table)} rows from {input_file}[/green]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console
    ) as progress:

        task = progress.add_task("Starting...", total=len(table))
        pipeline = build_pipeline(
            table,
            config,
            entity_column=column,
            observers=[RichProgressObserver(progress, task)],
        )

        try:
            try:
                worker = pipeline.start_background()
            except EnrichmentError as e:
                raise click.ClickException(str(e))

            try:
                while worker.is_alive():
                    worker.join(0.2)
            except KeyboardInterrupt:
                console.print("\n[yellow]Stopping after the current row...[/yellow]")
                try:
                    pipeline.stop()
                except InvalidTransitionError:
                    # The run ended before the interrupt was handled
                    logger.info(f"Run already {pipeline.status} when interrupted")
                worker.join()
        finally:
            pipeline.row_enricher.close()

    if pipeline.status != PipelineStatus.COMPLETED:
        console.print(f"[red]Processing ended in state '{pipeline.status}', no output written[/red]")
        ctx.exit(1)

    results = pipeline.results
    write_table(results, output_file)
    console.print(
        f"\n[green]Processing completed! {pipeline.success_count}/{len(table)} rows enriched[/green]"
    )
    console.print(f"[green]Results exported to: {output_file}[/green]")
    print_statistics(table, results)


@cli.command()
@click.argument('original_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('enriched_file', type=click.Path(exists=True, dir_okay=False))
def stats(original_file, enriched_file):
    """Show completion statistics of ENRICHED_FILE against ORIGINAL_FILE"""

    print_statistics(read_table(original_file), read_table(enriched_file))


@cli.group(name='config')
def config_group():
    """Configuration commands"""
    pass


@config_group.command()
@click.pass_context
def check(ctx):
    """Show the active configuration and credential status"""

    config = ctx.obj['config']
    missing = config.credentials.missing()

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Gemini API key", "✗ Missing" if 'gemini_api_key' in missing else "✓ Set")
    table.add_row("Firecrawl API key", "✗ Missing" if 'firecrawl_api_key' in missing else "✓ Set")
    table.add_row("Discovery provider", config.discovery.provider)
    table.add_row("Extraction model", config.extraction.model)
    table.add_row("Content limit", f"{config.extraction.max_content_chars} chars")
    table.add_row("Row delay", f"{config.pipeline.row_delay}s")

    console.print(table)

    if missing:
        console.print("[red]✗ Please configure your API keys first[/red]")
        ctx.exit(1)
    console.print("[green]✓ Configuration is ready[/green]")


if __name__ == '__main__':
    cli()
