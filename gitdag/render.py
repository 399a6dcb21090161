"""
Rendering functions for gitdag output.

This module handles all pretty-printing and table formatting.
Services return report values, this module makes them human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List, Optional

from .domain.report import BlobReport, CommitReport, TreeReport, ObjectSize
from .format_utils import display_size

console = Console()


def _summary_table(title: str) -> Table:
    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    return table


def _object_id(obj: Optional[ObjectSize]) -> str:
    if obj is None:
        return "-"
    return obj.hash or f"#{obj.index}"


def _object_size(obj: Optional[ObjectSize]) -> str:
    if obj is None:
        return "-"
    return display_size(obj.size_on_disk)


def render_commit_report(report: CommitReport, out: Optional[Console] = None) -> None:
    out = out or console
    table = _summary_table("Commit Report")
    table.add_row("Total Commits", str(report.total_count))
    table.add_row("Total Commits Size", display_size(report.total_size))
    table.add_row("Largest Commit Object Size", _object_size(report.largest_commit))
    table.add_row("Largest Commit Object Id", _object_id(report.largest_commit))
    table.add_row("Largest Contributing Commit Size", _object_size(report.largest_contributing))
    table.add_row("Largest Contributing Commit Object Id", _object_id(report.largest_contributing))
    out.print(table)


def render_tree_report(report: TreeReport, out: Optional[Console] = None) -> None:
    out = out or console
    table = _summary_table("Tree Report")
    table.add_row("Total Trees", str(report.total_count))
    table.add_row("Total Trees Size", display_size(report.total_size))
    table.add_row("Largest Tree Object Size", _object_size(report.largest_tree))
    table.add_row("Largest Tree Object Id", _object_id(report.largest_tree))
    most = report.most_versions
    if most is not None:
        # the root tree has no path
        table.add_row("Most Trees at Path", most.path or "/")
        table.add_row("Count Most Trees at Path", str(most.count))
        table.add_row("Most Trees at Path Total Size", display_size(most.total_size))
    out.print(table)


def render_blob_report(report: BlobReport, out: Optional[Console] = None) -> None:
    out = out or console
    table = _summary_table("Blob Report")
    table.add_row("Total Blobs", str(report.total_count))
    table.add_row("Total Blobs Size", display_size(report.total_size))
    out.print(table)

    if not report.largest:
        out.print("[yellow]No blobs to rank.[/yellow]")
        return

    largest = Table(
        title=f"Top {len(report.largest)} Largest Blobs",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    largest.add_column("Size", justify="right", style="green")
    largest.add_column("Hash", style="dim")
    largest.add_column("Path", style="cyan")
    for blob in report.largest:
        largest.add_row(display_size(blob.size_on_disk), _object_id(blob), blob.path or "")
    out.print(largest)


def render_reports(reports: List, out: Optional[Console] = None) -> None:
    """Render any mix of commit, tree and blob reports, in order."""
    renderers = {
        CommitReport: render_commit_report,
        TreeReport: render_tree_report,
        BlobReport: render_blob_report,
    }
    for report in reports:
        renderers[type(report)](report, out)
