"""CLI entry-point: analyze a policy document into a risk report."""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from cra.analysis.pipeline import analyze_text
from cra.analysis.rules import RULES
from cra.config import get_settings
from cra.errors import ConfigError, DocumentParseError, InsufficientTextError, ModelGatewayError
from cra.ingest.text_extract import extract_text_from_path
from cra.llm import provider_from_settings
from cra.report.markdown import render_markdown_report, write_markdown_report

app = typer.Typer(help="Compliance Risk Auditor — citation-backed risk reports for policy documents")


@app.command()
def analyze(
    path: str = typer.Argument(..., help="Path to the document (PDF, .txt or .md)"),
    provider: str = typer.Option(None, help="LLM provider: openai | anthropic (default from env)"),
    offline: bool = typer.Option(False, "--offline", help="Skip the model; heuristic rules only"),
    format: str = typer.Option("json", help="Output format: json or md"),
    output: str = typer.Option(None, help="Write the report to this file instead of stdout"),
):
    """Extract text, run the analysis and print or write the report."""
    console = Console(stderr=True)
    settings = get_settings()
    fmt = format.strip().lower()
    if fmt not in ("json", "md"):
        console.print(f"[red]Error: unknown format '{format}' (use json or md)[/red]")
        raise typer.Exit(1)

    try:
        config = settings.analysis_config()
        console.print("Extracting text...")
        text = extract_text_from_path(path, min_chars=settings.cra_min_text_chars)
        llm = None
        if not offline:
            provider_name = (provider or settings.cra_llm_provider).lower()
            if settings.api_key_for(provider_name):
                llm = provider_from_settings(settings, provider_name)
            else:
                console.print(f"[yellow]No API key for '{provider_name}'; running heuristics only[/yellow]")
        console.print("Analyzing (heuristics only)..." if llm is None else "Analyzing with model...")
        report = analyze_text(text, llm=llm, config=config)
    except (ConfigError, DocumentParseError, InsufficientTextError, FileNotFoundError, ModelGatewayError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if fmt == "md":
        content = render_markdown_report(report, source=path)
    else:
        content = json.dumps(report.model_dump(mode="json"), indent=2, ensure_ascii=False)

    if output:
        if fmt == "md":
            write_markdown_report(output, content)
        else:
            Path(output).parent.mkdir(parents=True, exist_ok=True)
            Path(output).write_text(content, encoding="utf-8")
        console.print(f"Wrote {output}")
    else:
        typer.echo(content)
    console.print(
        f"[green]Done.[/green] Overall score {report.scores.overall}/100, "
        f"{len(report.findings)} finding(s) ({report.stats.findings_source})."
    )


@app.command()
def rules():
    """List the heuristic rule table."""
    console = Console()
    table = Table(title="Heuristic rules")
    table.add_column("Rule")
    table.add_column("Theme")
    table.add_column("Title")
    table.add_column("Severity")
    table.add_column("Gap-fill")
    for rule in RULES:
        table.add_row(
            rule.rule_id,
            rule.theme.value,
            rule.title,
            rule.severity.value,
            "yes" if rule.mandatory else "",
        )
    console.print(table)


if __name__ == "__main__":
    app()
