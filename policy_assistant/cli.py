"""
Command-line interface for the Policy Assistant.

Provides commands for PDF ingestion, context retrieval and document
management.

Usage:
    python -m policy_assistant.cli ingest <file_or_directory>...
    python -m policy_assistant.cli search "your question"
    python -m policy_assistant.cli list
    python -m policy_assistant.cli show <doc_id>
    python -m policy_assistant.cli delete <doc_id>
    python -m policy_assistant.cli clear --confirm
"""

import logging
from pathlib import Path

import click

from .config import AppConfig
from .exceptions import BatchIngestionError, FileExtractionError
from .knowledge_base import KnowledgeBase, collect_files
from .utils.logger import get_logger, set_global_level

logger = get_logger(__name__)

_QUALITY_COLOURS = {
    "excellent": "green",
    "good": "green",
    "fair": "yellow",
    "poor": "red",
}


def _open_kb(ctx) -> KnowledgeBase:
    """Create a KnowledgeBase from the context's configuration."""
    return KnowledgeBase.from_config(ctx.obj["config"])


@click.group()
@click.option(
    "--config", "config_path",
    default="configs/config.yaml",
    type=click.Path(dir_okay=False),
    help="YAML configuration file.",
    show_default=True,
)
@click.option(
    "--store", "-s",
    default=None,
    type=click.Path(file_okay=False),
    help="Directory of the document store (overrides the config).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx, config_path, store, verbose):
    """Policy Assistant: PDF policy ingestion and context retrieval.

    Ingest company policy PDFs, then retrieve the passages relevant
    to a question as context for a language model.
    """
    if verbose:
        set_global_level(logging.DEBUG)

    config = AppConfig.from_yaml(config_path)
    if store:
        config.storage.directory = store

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("--abort-on-error", is_flag=True,
              help="Stop the whole batch at the first file that fails.")
@click.pass_context
def ingest(ctx, paths, abort_on_error):
    """Ingest PDF files or directories of PDF files.

    Extracts the text of every page, splits it into sections and adds
    the documents to the store.

    \b
    Examples:
        python -m policy_assistant.cli ingest handbook.pdf
        python -m policy_assistant.cli ingest ./policies/
    """
    if abort_on_error:
        ctx.obj["config"].ingestion.on_file_error = "abort"
    kb = _open_kb(ctx)

    files = collect_files(Path(p) for p in paths)
    if not files:
        click.echo(click.style("No PDF files found.", fg="yellow"))
        raise SystemExit(1)

    click.echo(f"Ingesting {len(files)} file(s)")
    failed = []
    with click.progressbar(length=100, label="Processing") as bar:
        shown = [0]

        def on_progress(percent: float) -> None:
            step = int(percent) - shown[0]
            if step > 0:
                bar.update(step)
                shown[0] += step

        try:
            documents = kb.ingest(files, progress_callback=on_progress)
        except FileExtractionError as e:
            click.echo()
            click.echo(click.style(f"  ✗ {e}", fg="red"))
            click.echo("Batch aborted; no documents were added.")
            raise SystemExit(1)
        except BatchIngestionError as e:
            documents = e.documents
            failed = e.failures

    for doc in documents:
        click.echo(click.style(
            f"  ✓ {doc.name}: {doc.metadata.page_count} pages, "
            f"{doc.metadata.word_count} words, {len(doc.sections)} sections",
            fg="green",
        ))
    for failure in failed:
        click.echo(click.style(f"  ✗ {failure}", fg="red"))

    click.echo(f"\nStore size: {len(kb)} documents")
    if failed:
        raise SystemExit(1)


@cli.command()
@click.argument("query")
@click.option("--scores", is_flag=True,
              help="List matching sections with their scores instead of the context block.")
@click.pass_context
def search(ctx, query, scores):
    """Retrieve policy context relevant to a question.

    \b
    Examples:
        python -m policy_assistant.cli search "how many vacation days"
        python -m policy_assistant.cli search "expense limits" --scores
    """
    kb = _open_kb(ctx)

    if len(kb) == 0:
        click.echo(click.style(
            "No documents stored. Ingest some first: "
            "python -m policy_assistant.cli ingest <path>", fg="yellow"
        ))
        raise SystemExit(1)

    if scores:
        matches = kb.rank(query)
        if not matches:
            click.echo(click.style("No relevant policy found.", fg="yellow"))
            return
        for match in matches:
            click.echo(click.style(
                f"[{match.rank}] Score: {match.score}", bold=True
            ))
            click.echo(f"    Source:  {match.source}")
            click.echo(f"    Section: {match.section.title}")
            pages = ", ".join(str(p) for p in match.section.page_numbers)
            click.echo(f"    Pages:   {pages}")
            click.echo()
        return

    context = kb.search(query)
    if not context:
        click.echo(click.style("No relevant policy found.", fg="yellow"))
        return
    click.echo(context)


@cli.command("list")
@click.pass_context
def list_documents(ctx):
    """List stored documents."""
    kb = _open_kb(ctx)

    if len(kb) == 0:
        click.echo("No documents stored.")
        return

    click.echo(
        f"{'ID':<34} {'Name':<30} {'Pages':>5} {'Words':>7} {'Sections':>8} {'Quality':<10} Uploaded"
    )
    click.echo("─" * 120)
    for doc in kb.documents:
        quality = doc.metadata.extraction_quality.value
        click.echo(
            f"{doc.id:<34} {doc.name[:30]:<30} {doc.metadata.page_count:>5} "
            f"{doc.metadata.word_count:>7} {len(doc.sections):>8} "
            + click.style(f"{quality:<10}", fg=_QUALITY_COLOURS[quality])
            + f" {doc.uploaded_at:%Y-%m-%d %H:%M}"
        )


@cli.command()
@click.argument("doc_id")
@click.pass_context
def show(ctx, doc_id):
    """Show the sections of a stored document."""
    kb = _open_kb(ctx)
    doc = kb.get_document(doc_id)
    if doc is None:
        click.echo(click.style(f"No document found with ID: {doc_id}", fg="yellow"))
        raise SystemExit(1)

    click.echo(click.style(doc.name, bold=True))
    click.echo(f"  Pages:   {doc.metadata.page_count}")
    click.echo(f"  Words:   {doc.metadata.word_count}")
    click.echo(f"  Size:    {doc.metadata.file_size:,} bytes")
    click.echo(f"  Quality: {doc.metadata.extraction_quality.value}")
    click.echo(click.style("\nSections:", bold=True))
    for i, section in enumerate(doc.sections, 1):
        pages = ", ".join(str(p) for p in section.page_numbers)
        click.echo(f"  {i}. {section.title} (p. {pages}, {len(section.content)} chars)")
        if section.keywords:
            click.echo(f"     Keywords: {', '.join(section.keywords[:10])}")


@cli.command("delete")
@click.argument("doc_id")
@click.option("--confirm", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def delete_doc(ctx, doc_id, confirm):
    """Delete a document by its ID.

    Use the 'list' command to see document IDs.
    """
    kb = _open_kb(ctx)

    if not confirm:
        click.confirm(f"Delete document {doc_id}?", abort=True)

    if kb.delete_document(doc_id):
        click.echo(click.style(f"Deleted document {doc_id}.", fg="green"))
    else:
        click.echo(click.style(f"No document found with ID: {doc_id}", fg="yellow"))


@cli.command()
@click.option("--confirm", is_flag=True,
              help="Required flag to confirm clearing the store.")
@click.pass_context
def clear(ctx, confirm):
    """Delete every stored document. Requires --confirm flag."""
    if not confirm:
        raise click.UsageError("Refusing to clear the store without --confirm.")
    kb = _open_kb(ctx)
    count = len(kb)
    kb.clear()
    click.echo(click.style(
        f"Store cleared. Removed {count} documents.", fg="green"
    ))


if __name__ == "__main__":
    cli()
