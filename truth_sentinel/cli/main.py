"""Interactive CLI for Truth Sentinel using Typer and Rich."""

import asyncio
import sys
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from truth_sentinel.config.logging import configure_logging, get_logger
from truth_sentinel.config.settings import settings
from truth_sentinel.utils.logging import configure_structured_logging

app = typer.Typer(
    help="Truth Sentinel CLI - university misinformation verification pipeline",
    add_completion=False,
)

console = Console()

logger = get_logger("cli")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override LOG_LEVEL for this run (DEBUG, INFO, WARNING, ...)"
    ),
) -> None:
    if log_level:
        configure_logging(log_level)
        configure_structured_logging(level=log_level)


VERDICT_STYLES = {
    "HOAX": "bold red",
    "VERIFIED": "bold green",
    "UNABLE_TO_VERIFY": "bold yellow",
    "SKIP": "dim",
}


def _configured(value: Optional[str]) -> str:
    return "✓ Configured" if value else "⚠ Not Configured"


@app.command()
def status() -> None:
    """
    Display system status and configuration.

    Shows which evidence sources have credentials, the corpus location and
    logging settings.
    """
    logger.info("Displaying system status")

    table = Table(title="Truth Sentinel Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", width=22)
    table.add_column("Status", style="green", width=18)
    table.add_column("Details", style="yellow")

    python_version = f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    table.add_row("Environment", "✓ Ready", python_version)
    table.add_row("Gemini (wording, media)", _configured(settings.gemini_api_key), settings.gemini_model)
    table.add_row("Exa search", _configured(settings.exa_api_key), settings.exa_base_url)
    table.add_row("Perplexity", _configured(settings.perplexity_api_key), settings.perplexity_model)
    table.add_row("YouTube", _configured(settings.youtube_api_key), "Data API v3 + transcripts")
    table.add_row("Telegram", _configured(settings.telegram_bot_token), "media download, delivery")
    table.add_row(
        "Corpus",
        "✓ Present" if Path(settings.data_dir).exists() else "⚠ Missing",
        f"{settings.data_dir} (chunk {settings.chunk_size}/{settings.chunk_overlap})",
    )
    table.add_row("Learning log", "✓ Active", settings.learning_log_path)
    table.add_row("Logging", "✓ Active", f"Level: {settings.log_level}, Format: {settings.log_format}")

    console.print(table)


@app.command()
def classify(
    text: str = typer.Argument(..., help="Message text"),
    caption: Optional[str] = typer.Option(None, help="Media caption"),
    forwarded: bool = typer.Option(False, "--forwarded", help="Message was forwarded"),
    image: bool = typer.Option(False, "--image", help="Message carries a photo"),
    document: bool = typer.Option(False, "--document", help="Message carries a document"),
) -> None:
    """Run the gatekeeper on a message."""
    from truth_sentinel.gatekeeper import Gatekeeper, Message

    message = Message(
        text=text,
        caption=caption,
        is_forwarded=forwarded,
        has_image=image,
        has_document=document,
    )
    decision = Gatekeeper().classify(message)

    style = "green" if decision.should_process else "dim"
    console.print(f"[{style}]should_process={decision.should_process}[/{style}]")
    console.print(f"[cyan]priority:[/cyan] {decision.priority.value}")
    console.print(f"[cyan]reason:[/cyan] {decision.reason}")
    if decision.matched_keywords:
        console.print(f"[cyan]keywords:[/cyan] {', '.join(decision.matched_keywords)}")


@app.command()
def query(
    text: str = typer.Argument(..., help="Query text"),
    top_k: int = typer.Option(3, "--top-k", "-k", help="Number of chunks"),
    data_dir: Optional[str] = typer.Option(None, help="Corpus directory"),
) -> None:
    """Search the local reference corpus."""
    from truth_sentinel.retrieval import DocumentIndex

    index = DocumentIndex(data_dir, exclude=[settings.learning_log_path])
    result = asyncio.run(index.query(text, top_k=top_k))

    if not result.results:
        console.print("[yellow]No documents indexed.[/yellow]")
        return

    table = Table(title=f"Top {len(result.results)} of {result.total_chunks} chunks")
    table.add_column("Score", style="green", width=7)
    table.add_column("Source", style="cyan")
    table.add_column("#", width=4)
    table.add_column("Text")
    for chunk in result.results:
        table.add_row(f"{chunk.relevance_score:.2f}", chunk.source_name, str(chunk.chunk_index), chunk.text[:120])
    console.print(table)
    console.print(f"[dim]has_relevant_results={result.has_relevant_results}[/dim]")


@app.command()
def reload(
    data_dir: Optional[str] = typer.Option(None, help="Corpus directory"),
) -> None:
    """Rebuild the local document index and report the chunk count."""
    from truth_sentinel.retrieval import DocumentIndex

    index = DocumentIndex(data_dir, exclude=[settings.learning_log_path])
    count = asyncio.run(index.reload())
    logger.info(f"Index rebuilt with {count} chunks")
    console.print(f"[green]✓[/green] Indexed {count} chunks from {index.data_dir}")


@app.command()
def search(
    text: str = typer.Argument(..., help="Claim or search text"),
    source: str = typer.Option("official", help="official, exa, perplexity or youtube"),
    authority: str = typer.Option("general", help="Trusted domain group for official search"),
    num_results: int = typer.Option(5, "--num-results", "-n", help="Results to request"),
) -> None:
    """Query a single evidence source."""
    from truth_sentinel.evidence import (
        ExaSearchSource,
        OfficialSourceSearch,
        PerplexitySearchSource,
        SearchOptions,
        YouTubeVerificationSource,
    )

    sources = {
        "official": lambda: OfficialSourceSearch(authority=authority, num_results=num_results),
        "exa": ExaSearchSource,
        "perplexity": PerplexitySearchSource,
        "youtube": YouTubeVerificationSource,
    }
    if source not in sources:
        console.print(f"[red]✗[/red] Unknown source '{source}'. Choose from: {', '.join(sources)}")
        raise typer.Exit(1)

    evidence_source = sources[source]()
    options = None if source == "official" else SearchOptions(num_results=num_results)
    result = asyncio.run(evidence_source.search(text, options))

    if not result.found:
        reason = f" ({result.error})" if result.error else ""
        console.print(f"[yellow]No evidence found{reason}.[/yellow]")
        return

    for item in result.items:
        flag = " [green]OFFICIAL[/green]" if item.is_official else ""
        console.print(Panel(
            item.content[:500],
            title=f"{item.title}{flag}",
            subtitle=item.url or result.source_name,
            border_style="cyan",
        ))
    console.print(f"[dim]Sources checked: {', '.join(result.sources_checked)}[/dim]")


@app.command()
def verify(
    text: str = typer.Argument(..., help="Message text"),
    forwarded: bool = typer.Option(False, "--forwarded", help="Message was forwarded"),
    no_model: bool = typer.Option(False, "--no-model", help="Use template wording only"),
) -> None:
    """Run the full verification pipeline on a message."""
    from truth_sentinel.gatekeeper import Message
    from truth_sentinel.orchestration import VerdictOrchestrator, VerdictPhraser

    orchestrator = VerdictOrchestrator.from_settings()
    if no_model:
        orchestrator.phraser = VerdictPhraser(use_model=False)

    start_time = time.time()
    outcome = asyncio.run(orchestrator.process(Message(text=text, is_forwarded=forwarded)))
    elapsed = time.time() - start_time

    if outcome.skipped:
        console.print(f"[dim]Skipped ({outcome.skip_reason})[/dim]")
        return

    verdict = outcome.verdict.value if outcome.verdict else "ERROR"
    console.print(Panel(
        outcome.response_text or "",
        title=f"[{VERDICT_STYLES.get(verdict, 'bold')}]{verdict}[/] ({outcome.confidence}/100)",
        border_style="green" if verdict == "VERIFIED" else "red" if verdict == "HOAX" else "yellow",
    ))
    console.print(f"[dim]Trail: {' -> '.join(s.value for s in outcome.state_trail)}[/dim]")
    console.print(f"[dim]Logged: {outcome.logged}, {elapsed:.2f}s[/dim]")
    for case in outcome.similar_cases:
        console.print(f"[dim]Similar: {case.verdict} - {case.claim}[/dim]")


@app.command()
def insights(
    claim: str = typer.Argument(..., help="Claim to compare with past verdicts"),
) -> None:
    """Show learned HOAX and VERIFIED vocabulary for a claim."""
    from truth_sentinel.data_management import VerificationLog

    result = asyncio.run(VerificationLog().get_insights(claim))

    table = Table(title=f"Learning insights ({result.total_verifications} verifications)")
    table.add_column("HOAX patterns", style="red")
    table.add_column("VERIFIED patterns", style="green")
    rows = max(len(result.hoax_patterns), len(result.verified_patterns))
    for i in range(rows):
        table.add_row(
            result.hoax_patterns[i] if i < len(result.hoax_patterns) else "",
            result.verified_patterns[i] if i < len(result.verified_patterns) else "",
        )
    console.print(table)
    console.print(f"[bold]Recommendation:[/bold] {result.recommendation}")


@app.command()
def feedback(
    timestamp: str = typer.Argument(..., help="Timestamp of the logged entry"),
    claim: str = typer.Argument(..., help="Claim of the logged entry"),
    correct: bool = typer.Option(..., "--correct/--incorrect", help="Was the verdict correct"),
    note: Optional[str] = typer.Option(None, help="Free-text feedback"),
) -> None:
    """Record human feedback on a past verdict."""
    from truth_sentinel.data_management import VerificationLog

    updated = asyncio.run(VerificationLog().record_feedback(timestamp, claim, correct, note))
    if not updated:
        console.print("[red]✗[/red] No matching log entry")
        raise typer.Exit(1)
    console.print("[green]✓[/green] Feedback recorded")


@app.command("corpus-status")
def corpus_status() -> None:
    """Show file count, size and age of the corpus directory."""
    from truth_sentinel.data_management import CorpusManager

    result = CorpusManager().status()
    if not result.exists:
        console.print(f"[yellow]Corpus directory {settings.data_dir} does not exist.[/yellow]")
        return

    table = Table(title=f"{result.file_count} files, {result.total_size_mb:.2f}MB")
    table.add_column("File", style="cyan")
    table.add_column("Size (MB)", justify="right")
    table.add_column("Age (days)", justify="right")
    for f in result.files:
        table.add_row(f.name, f"{f.size_mb:.3f}", str(f.age_days))
    console.print(table)


@app.command("corpus-cleanup")
def corpus_cleanup(
    max_age_days: int = typer.Option(30, help="Delete files older than this"),
    max_size_mb: float = typer.Option(50.0, help="Folder size limit in MB"),
    keep_min: int = typer.Option(5, help="Always keep this many newest files"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only report what would be deleted"),
) -> None:
    """Prune old documents from the corpus directory."""
    from truth_sentinel.data_management import CorpusManager

    report = CorpusManager().cleanup(
        max_age_days=max_age_days,
        max_folder_size_mb=max_size_mb,
        keep_min_files=keep_min,
        dry_run=dry_run,
    )
    style = "green" if report.success else "red"
    console.print(f"[{style}]{report.message}[/{style}]")
    for name in report.deleted_files:
        console.print(f"[dim]- {name}[/dim]")
    if not report.success:
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Display version information."""
    console.print("[bold]Truth Sentinel[/bold]")
    console.print("Version: 0.1.0")


if __name__ == "__main__":
    app()
