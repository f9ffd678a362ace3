"""
CLI Main - Typer-based command-line interface.

Usage:
    ragrank init
    ragrank search "refund policy" --tenant acme
    ragrank documents "refund policy" --tenant acme --count 3
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ragrank.config import RagRankError, Settings, get_settings

if TYPE_CHECKING:
    from ragrank.domains.search import HybridSearchEngine

app = typer.Typer(
    name="ragrank",
    help="RagRank - Hybrid retrieval and ranking engine",
    add_completion=False,
)
console = Console()


@asynccontextmanager
async def _engine(settings: Settings) -> AsyncIterator[HybridSearchEngine]:
    """Build a search engine from settings and close its adapters afterwards."""
    from ragrank.adapters import (
        CohereReranker,
        FAISSIndex,
        SentenceTransformerEmbedder,
        SQLiteRepository,
    )
    from ragrank.domains.search import HybridSearchEngine

    repo = SQLiteRepository(settings.db_path)
    index = FAISSIndex(dimension=settings.embedding_dimension)
    if (settings.faiss_index_path / "metadata.json").exists():
        await index.load(settings.faiss_index_path)

    reranker = CohereReranker(
        api_key=settings.cohere_api_key,
        model=settings.cohere_model,
        base_url=settings.cohere_base_url,
        timeout=settings.rerank_timeout_seconds,
    )
    engine = HybridSearchEngine(
        embedder=SentenceTransformerEmbedder(
            settings.embedding_model, dimension=settings.embedding_dimension
        ),
        vector_index=index,
        text_index=repo,
        document_store=repo,
        reranking_service=reranker,
        config=settings.engine_config(),
    )
    try:
        yield engine
    finally:
        await reranker.close()
        await repo.close()


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant id"),
    top_k: int = typer.Option(5, "--top-k", "-n", help="Number of results"),
    min_score: float = typer.Option(0.0, "--min-score", help="Minimum relevance score (0-1)"),
    pool_size: int = typer.Option(20, "--pool-size", help="Rerank pool size"),
    rerank: bool = typer.Option(True, "--rerank/--no-rerank", help="Use reranking"),
) -> None:
    """Search chunks with hybrid retrieval."""
    asyncio.run(_search_async(query, tenant, top_k, min_score, pool_size, rerank))


async def _search_async(
    query: str,
    tenant: str,
    top_k: int,
    min_score: float,
    pool_size: int,
    rerank: bool,
) -> None:
    """Async search implementation."""
    from ragrank.domains.search import SearchOptions

    options = SearchOptions(
        top_k=top_k,
        min_relevance_score=min_score,
        rerank_pool_size=pool_size,
        use_reranking=rerank,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Searching...", total=None)
        try:
            async with _engine(get_settings()) as engine:
                results = await engine.search(query, tenant, options)
        except RagRankError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    if not results:
        console.print("[yellow]No results found[/yellow]")
        return

    table = Table(title=f"Results for: {query}")
    table.add_column("#", style="dim")
    table.add_column("Source", style="cyan")
    table.add_column("Page")
    table.add_column("Score", style="green")
    table.add_column("Scale", style="dim")
    table.add_column("Content")

    for position, result in enumerate(results, 1):
        table.add_row(
            str(position),
            result.source_name or result.parent_document_id,
            str(result.page_number) if result.page_number is not None else "-",
            f"{result.relevance_score:.4f}",
            result.score_scale.value,
            result.content[:80],
        )

    console.print(table)


@app.command()
def documents(
    query: str = typer.Argument(..., help="Search query"),
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant id"),
    count: int = typer.Option(3, "--count", "-n", help="Number of documents"),
) -> None:
    """Find the most relevant whole documents."""
    asyncio.run(_documents_async(query, tenant, count))


async def _documents_async(query: str, tenant: str, count: int) -> None:
    """Async document discovery implementation."""
    try:
        async with _engine(get_settings()) as engine:
            document_ids = await engine.find_relevant_documents(query, tenant, count)
    except RagRankError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not document_ids:
        console.print("[yellow]No documents found[/yellow]")
        return

    for position, document_id in enumerate(document_ids, 1):
        console.print(f"{position}. {document_id}")


@app.command()
def init() -> None:
    """Initialize the RagRank database."""
    asyncio.run(_init_async())


async def _init_async() -> None:
    """Async initialization."""
    from ragrank.adapters import SQLiteRepository

    settings = get_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    repo = SQLiteRepository(settings.db_path)
    try:
        await repo.initialize()
        chunk_count = await repo.get_chunk_count()
    finally:
        await repo.close()

    console.print("\n[green]Initialization complete![/green]")
    console.print(f"[dim]Database: {settings.db_path}[/dim]")
    console.print(f"[dim]Indexed chunks: {chunk_count}[/dim]")


@app.command()
def version() -> None:
    """Show version information."""
    from ragrank import __version__

    console.print(f"RagRank v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
