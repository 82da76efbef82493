"""Quality Report Generator.

This module persists and displays the data quality report of a pipeline run.
Reports summarize the raw batch, the fallbacks applied during normalization
and the duplicates collapsed, for later auditing.

Data Quality Impact:
    - Provides an audit trail of malformed phones, unknown labels and
      unparseable dates without rejecting any record
    - Can be saved as JSON next to the cleaned output
"""

import json
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from src.domain.ports import Result
from src.domain.quality import QualityReport


def generate_quality_report(
    report: QualityReport,
    output_path: Optional[str] = None,
) -> Result[dict]:
    """Convert a quality report to a dictionary, optionally saving it as JSON.

    Parameters:
        report: Quality report of a pipeline run
        output_path: Optional path to save report as JSON file

    Returns:
        Result[dict]: Report dictionary (with ``saved_to`` when written) or error
    """
    report_dict = report.model_dump(mode="json")

    if output_path:
        try:
            output_file = Path(output_path)
            output_file.parent.mkdir(parents=True, exist_ok=True)

            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump(report_dict, f, indent=2)

            return Result.success_result({
                **report_dict,
                "saved_to": str(output_file)
            })
        except OSError as e:
            return Result.failure_result(
                ValueError(f"Failed to save report to {output_path}: {str(e)}"),
                error_type="ValueError"
            )

    return Result.success_result(report_dict)


def print_quality_report_summary(report: QualityReport, console: Optional[Console] = None) -> None:
    """Print a human-readable summary of the quality report.

    Parameters:
        report: Quality report of a pipeline run
        console: Rich console to print to (default: a new stdout console)
    """
    console = console or Console()

    table = Table(title="Data Quality Report", show_header=True, header_style="bold")
    table.add_column("Section", style="cyan")
    table.add_column("Check")
    table.add_column("Count", justify="right")

    source = report.source
    table.add_row("Source", "Total rows", f"{source.total_rows:,}")
    table.add_row("", "Unique patient ids", f"{source.unique_patients:,}")
    table.add_row("", "Missing names", f"{source.missing_names:,}")
    table.add_row("", "Unusual genders", f"{source.unusual_genders:,}")

    audit = report.audit
    table.add_row("Normalization", "Invalid phones", f"{audit.invalid_phones:,}")
    table.add_row("", "Unknown names", f"{audit.unknown_names:,}")
    table.add_row("", "Unknown genders", f"{audit.unknown_genders:,}")
    table.add_row("", "Unknown vital types", f"{audit.unknown_vital_types:,}")
    table.add_row("", "Unknown lab tests", f"{audit.unknown_lab_tests:,}")
    table.add_row("", "Missing dates of birth", f"{audit.missing_dates_of_birth:,}")
    table.add_row("", "Missing admission times", f"{audit.missing_admission_times:,}")
    table.add_row("", "Missing discharge times", f"{audit.missing_discharge_times:,}")

    dedup = report.deduplication
    table.add_row("Deduplication", "Records in", f"{dedup.records_in:,}")
    table.add_row("", "Records out", f"{dedup.records_out:,}")
    table.add_row("", "Duplicates removed", f"{dedup.duplicates_removed:,}")
    table.add_row("", "Patients with duplicates", f"{len(dedup.duplicate_patient_ids):,}")

    console.print(table)
