"""CLI for the ``statement_insights`` package.

Command handlers (``cmd_normalize``, ``cmd_analyze``) return a process exit
code; the Typer commands below wrap them. Environment variables (notably
``OPENAI_API_KEY``) are loaded from a local ``.env`` using ``python-dotenv``
before any command runs. Business logic lives in :mod:`statement_insights.api`
and the modules it calls.
"""

from __future__ import annotations

import json
import os
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from typer.models import OptionInfo

from .config import Settings, load_settings
from .logging_setup import configure_logging

if TYPE_CHECKING:
    from .api import StatementAnalysis

# ---- Rendering helpers -------------------------------------------------------


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _transactions_table(transactions: Sequence[dict[str, Any]]) -> Table:
    table = Table(title=f"Transactions ({len(transactions)})")
    headers = list(transactions[0].keys()) if transactions else []
    for h in headers:
        table.add_column(str(h), overflow="fold")
    for row in transactions:
        table.add_row(*(_cell(row.get(h)) for h in headers))
    return table


def _print_insights(console: Console, analysis: StatementAnalysis) -> None:
    s = analysis.summary
    summary = Table(title="Summary", show_header=False)
    summary.add_row("Total Spent", f"{s.total_spent:.2f}")
    summary.add_row("Total Received", f"{s.total_received:.2f}")
    summary.add_row("Transactions", str(s.num_transactions))
    summary.add_row("Average Debit", f"{s.debit.average:.2f}")
    summary.add_row("Largest Debit", f"{s.debit.largest:.2f}")
    summary.add_row("Average Credit", f"{s.credit.average:.2f}")
    summary.add_row("Largest Credit", f"{s.credit.largest:.2f}")
    summary.add_row("Top Category", analysis.insights.summary.highest_category or "-")
    console.print(summary)

    ins = analysis.insights
    if ins.is_empty:
        console.print("[dim]No insights available.[/dim]")
        return

    sections: list[tuple[str, list[str], list[list[str]]]] = [
        (
            "Spending by Category",
            ["Category", "Amount"],
            [[c.label, _cell(c.amount)] for c in ins.chart_insights],
        ),
        (
            "Monthly Spending",
            ["Month", "Amount"],
            [[m.month, _cell(m.amount)] for m in ins.monthly_trends],
        ),
        (
            "Top Merchants",
            ["Merchant", "Amount"],
            [[t.merchant, _cell(t.amount)] for t in ins.top_merchants],
        ),
        (
            "Anomalies",
            ["Date", "Description", "Amount"],
            [[a.date, a.description, _cell(a.amount)] for a in ins.anomalies],
        ),
    ]
    for title, columns, rows in sections:
        if not rows:
            continue
        table = Table(title=title)
        for col in columns:
            table.add_column(col)
        for r in rows:
            table.add_row(*r)
        console.print(table)

    for title, lines in (("Reports", ins.reports), ("Suggestions", ins.suggestions)):
        if lines:
            console.print(f"[bold]{title}[/bold]")
            for line in lines:
                console.print(f"  • {line}")


def _report_ingest_error(e: Exception, path: Path) -> int:
    from .errors import HeaderNotFoundError, StatementError

    if isinstance(e, FileNotFoundError):
        typer.echo(f"Error: File not found: {path}", err=True)
    elif isinstance(e, PermissionError):
        typer.echo(f"Error: Permission denied: {path}", err=True)
    elif isinstance(e, HeaderNotFoundError):
        typer.echo(f"Error: {e} Please check your file.", err=True)
    elif isinstance(e, StatementError):
        typer.echo(f"Error: Failed to read statement: {e}", err=True)
    else:
        typer.echo(f"Error: Unexpected failure reading '{path}': {e}", err=True)
    return 1


def _resolve_settings(
    *, self_identity: str | None = None, model: str | None = None
) -> Settings | None:
    """Apply CLI overrides; print the error and return ``None`` when invalid."""

    try:
        return load_settings().with_overrides(self_identity=self_identity, model=model)
    except ValueError as e:
        typer.echo(f"Error: Invalid option: {e}", err=True)
        return None


# ---- Command handlers --------------------------------------------------------


def cmd_normalize(
    path: Path,
    *,
    output: Path | None = None,
    self_identity: str | None = None,
    console: Console | None = None,
) -> int:
    """Normalize ``path`` and print a table, or write it to ``output``."""

    from .errors import StatementError
    from .export import export_formatted
    from .pipeline import ingest_file

    settings = _resolve_settings(self_identity=self_identity)
    if settings is None:
        return 1
    try:
        result = ingest_file(path, self_identity=settings.self_identity)
    except (OSError, StatementError) as e:
        return _report_ingest_error(e, path)

    if result.is_empty:
        typer.echo("No transactions found.")
        return 0

    if output is not None:
        try:
            written = export_formatted(result.transactions, output)
        except (OSError, StatementError) as e:
            typer.echo(f"Error: Failed to write '{output}': {e}", err=True)
            return 1
        typer.echo(f"Wrote {len(result.transactions)} transactions to {written}")
        return 0

    (console or Console()).print(_transactions_table(result.transactions))
    return 0


def cmd_analyze(
    path: Path,
    *,
    self_identity: str | None = None,
    model: str | None = None,
    as_json: bool = False,
    with_insights: bool = True,
    console: Console | None = None,
) -> int:
    """Ingest ``path``, summarize it and request model insights."""

    from .api import analyze_statement
    from .errors import InsightsError, StatementError

    if with_insights and not os.getenv("OPENAI_API_KEY"):
        typer.echo("Error: OPENAI_API_KEY is not set in the environment.", err=True)
        return 1

    settings = _resolve_settings(self_identity=self_identity, model=model)
    if settings is None:
        return 1
    try:
        analysis = analyze_statement(path, settings=settings, with_insights=with_insights)
    except (OSError, StatementError) as e:
        return _report_ingest_error(e, path)
    except InsightsError as e:
        typer.echo(f"Error: {e}", err=True)
        return 1

    if analysis.ingest.is_empty:
        typer.echo("No transactions found.")
        return 0

    if as_json:
        payload = {
            "source_format": analysis.ingest.source_format,
            "summary": analysis.summary.to_dict(),
            "insights": analysis.insights.model_dump(),
        }
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    _print_insights(console or Console(), analysis)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Normalize bank-statement spreadsheets and generate spending insights with "
        "OpenAI. Loads OPENAI_API_KEY from a local .env before running."
    ),
)

# Module-level option objects (no calls in parameter defaults).
PATH_OPTION: OptionInfo = typer.Option(
    "--path",
    help="Statement spreadsheet (.xlsx, .xlsm, .xls or .csv)",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files
)
SELF_IDENTITY_OPTION: OptionInfo = typer.Option(
    "--self-identity",
    help="Account holder name (overrides STATEMENT_INSIGHTS_SELF_IDENTITY).",
)


@app.command("normalize")
def normalize_cmd(
    path: Annotated[Path, PATH_OPTION],
    self_identity: Annotated[str | None, SELF_IDENTITY_OPTION] = None,
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the table to .xlsx or .csv instead of printing."
    ),
) -> None:
    """Normalize a statement into canonical transactions."""

    raise typer.Exit(cmd_normalize(path, output=output, self_identity=self_identity))


@app.command("analyze")
def analyze_cmd(
    path: Annotated[Path, PATH_OPTION],
    self_identity: Annotated[str | None, SELF_IDENTITY_OPTION] = None,
    model: str | None = typer.Option(
        None, help="OpenAI model (overrides STATEMENT_INSIGHTS_MODEL)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print machine-readable JSON."),
    insights: bool = typer.Option(
        True, "--insights/--no-insights", help="Call the model for insights."
    ),
) -> None:
    """Summarize a statement and generate spending insights."""

    raise typer.Exit(
        cmd_analyze(
            path,
            self_identity=self_identity,
            model=model,
            as_json=as_json,
            with_insights=insights,
        )
    )


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to STATEMENT_INSIGHTS_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


def main() -> None:  # pragma: no cover - console script entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
