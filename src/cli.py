"""Command Line Interface for the Clinical-Normalizer pipeline.

This module provides a CLI using Typer for running the normalization
pipeline on a CSV export and writing the canonical, deduplicated record set.

Data Quality Impact:
    - Every run can produce a quality report (invalid phones, unknown labels,
      unparseable dates, collapsed duplicates)
    - Rows the ingester cannot read are counted and reported, never dropped silently
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from src.adapters.ingesters import get_adapter
from src.domain.golden_record import CanonicalDataset
from src.domain.patterns import PatternLibrary
from src.domain.pipeline import NormalizationPipeline, PipelineRunner
from src.domain.ports import IngestionError
from src.infrastructure.logging_config import setup_logging
from src.infrastructure.quality_report import generate_quality_report, print_quality_report_summary
from src.infrastructure.settings import settings

app = typer.Typer(
    name="clinical-normalizer",
    help="Clinical-Normalizer: canonical patient-encounter records from messy exports",
    add_completion=False
)
console = Console()
logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ('.csv', '.json')


def write_dataset(dataset: CanonicalDataset, output_file: Path) -> None:
    """Write the canonical dataset as CSV or JSON (chosen by file suffix).

    Raises:
        ValueError: If the suffix is not .csv or .json
    """
    suffix = output_file.suffix.lower()
    if suffix not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format {suffix!r}. Use one of: {', '.join(OUTPUT_FORMATS)}")

    output_file.parent.mkdir(parents=True, exist_ok=True)
    if suffix == '.csv':
        dataset.to_dataframe().to_csv(output_file, index=False)
        return

    # Dates stay calendar dates (YYYY-MM-DD); timestamps use ISO 8601
    rows = [
        {key: value.isoformat() if isinstance(value, date) else value for key, value in record.to_flat_dict().items()}
        for record in dataset.values()
    ]
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(rows, f, indent=2)


@app.command()
def clean(
    input_file: Path = typer.Argument(..., help="Input CSV/TSV file", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (.csv or .json)"),
    report: Optional[Path] = typer.Option(None, "--report", "-r", help="Save quality report JSON to this path"),
    save_report: bool = typer.Option(False, "--save-report", help="Save quality report JSON to the configured report directory"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Normalization thread count"),
    delimiter: str = typer.Option(",", "--delimiter", "-d", help="CSV delimiter"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit structured JSON log lines"),
) -> None:
    """Normalize and deduplicate clinical encounter records.

    This command processes data through the pipeline:
    1. Reads raw rows from the CSV file
    2. Normalizes every field of every row
    3. Keeps one record per patient (earliest admission)
    4. Writes the canonical dataset and prints a quality summary

    Examples:
        clinical-normalizer clean data/messy_clinical.csv -o out/clean.csv
        clinical-normalizer clean data/messy_clinical.csv -o out/clean.json -r out/quality.json
    """
    setup_logging(
        use_json=json_logs or settings.log_json,
        log_level="DEBUG" if verbose else settings.log_level,
    )

    if output is not None and output.suffix.lower() not in OUTPUT_FORMATS:
        console.print(f"[red]✗[/red] Unsupported output format: {output.suffix or '(none)'}")
        raise typer.Exit(code=1)

    console.print(f"\n[bold blue]{settings.app_name}[/bold blue]")
    console.print(f"[dim]Input file:[/dim] {input_file}")
    console.print()

    try:
        adapter = get_adapter(str(input_file), delimiter=delimiter, chunk_size=settings.chunk_size)

        raw_records = []
        rejected = 0
        with console.status("[bold green]Reading records..."):
            for result in adapter.ingest(str(input_file)):
                if result.is_success():
                    raw_records.append(result.value)
                else:
                    rejected += 1

        patterns = PatternLibrary.build(settings.phone_country_code)
        runner = PipelineRunner(
            pipeline=NormalizationPipeline(patterns),
            max_workers=workers or settings.max_workers,
            parallel_threshold=settings.parallel_threshold,
        )
        with console.status("[bold green]Normalizing records..."):
            dataset, quality = runner.run_with_report(raw_records)

        if output is not None:
            write_dataset(dataset, output)
            logger.info(f"Wrote {len(dataset)} records to {output}")

    except KeyboardInterrupt:
        console.print("\n[yellow]⚠[/yellow] Run interrupted by user")
        raise typer.Exit(code=130)
    except (IngestionError, ValueError, OSError) as e:
        console.print(f"\n[red]✗[/red] Run failed: {str(e)}")
        if verbose:
            console.print_exception()
        raise typer.Exit(code=1)

    summary_table = Table(show_header=False, box=None, padding=(0, 2))
    summary_table.add_row("Rows read:", f"[bold]{len(raw_records):,}[/bold]")
    summary_table.add_row("Rows rejected:", f"[red]{rejected:,}[/red]" if rejected else "0")
    summary_table.add_row("Patients:", f"[green]{len(dataset):,}[/green]")
    summary_table.add_row("Duplicates removed:", f"{quality.deduplication.duplicates_removed:,}")
    if output is not None:
        summary_table.add_row("Output:", str(output))
    console.print("[bold]Run Summary:[/bold]")
    console.print(summary_table)
    console.print()

    print_quality_report_summary(quality, console)

    if report is None and save_report:
        stamp = quality.generated_at.strftime("%Y%m%d_%H%M%S")
        report = Path(settings.report_dir) / f"quality_report_{stamp}.json"

    if report is not None:
        save_result = generate_quality_report(quality, output_path=str(report))
        if save_result.is_success():
            console.print(f"\n[green]✓[/green] Quality report saved: {report}")
        else:
            console.print(f"[yellow]⚠[/yellow] Failed to save quality report: {save_result.error}")

    if rejected:
        console.print(f"\n[yellow]⚠[/yellow] Completed with {rejected} unreadable rows")
        raise typer.Exit(code=1)

    console.print("\n[green]✓[/green] Completed successfully")


@app.command()
def info() -> None:
    """Display effective configuration."""
    console.print("[bold blue]Configuration[/bold blue]\n")

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_row("Application:", settings.app_name)
    info_table.add_row("Version:", settings.app_version)
    info_table.add_row("Log Level:", settings.log_level)
    info_table.add_row("JSON Logs:", "Enabled" if settings.log_json else "Disabled")
    info_table.add_row("Chunk Size:", str(settings.chunk_size))
    info_table.add_row("Max Workers:", str(settings.max_workers))
    info_table.add_row("Parallel Threshold:", f"{settings.parallel_threshold:,} records")
    info_table.add_row("Phone Country Code:", f"+{settings.phone_country_code}")
    info_table.add_row("Report Directory:", settings.report_dir)

    console.print(info_table)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version information"),
) -> None:
    """Clinical-Normalizer: canonical patient-encounter records from messy exports."""
    if version:
        console.print(f"{settings.app_name} v{settings.app_version}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
