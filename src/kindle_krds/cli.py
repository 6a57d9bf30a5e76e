"""Command-line interface for KRDS reader and timer data files."""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from kindle_krds.config import Config
from kindle_krds.models import FileKind, ReaderDataFile, TimerDataFile
from kindle_krds.services import KRDSService, LoadResult
from kindle_krds.utils import count_annotations, find_misfiled_notes, format_timestamp, preview
from kindle_krds.values import KRDSObject, Value

console = Console()

kind_option = click.option(
    "--kind",
    type=click.Choice([k.value for k in FileKind], case_sensitive=False),
    default=None,
    help="File family (guessed from the extension by default)",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Quiet mode")
@click.version_option(version="0.1.0")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """KRDS tools - Inspect Kindle reader and timer data files."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format=Config.LOG_FORMAT,
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(path: str, kind: str | None) -> LoadResult:
    """Load a file or abort with the error."""
    result = KRDSService.load(path, FileKind(kind) if kind else None)
    if not result.success:
        console.print(f"✗ {result.message}: {escape(result.error)}", style="red")
        raise click.Abort()
    return result


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@kind_option
def inspect(path: str, kind: str | None) -> None:
    """Summarize the fields present in a file."""
    result = _load(path, kind)
    data = result.data

    console.print(f"\n[bold]{escape(path)}[/bold] ({result.kind} data)\n")

    table = Table(title="Fields")
    table.add_column("Field", style="cyan")
    table.add_column("Present", justify="center")
    for name, value in vars(data).items():
        if name == "extra_fields":
            continue
        table.add_row(name, "[green]✓[/green]" if value is not None else "[dim]—[/dim]")
    console.print(table)

    if isinstance(data, ReaderDataFile):
        if data.font_preferences:
            prefs = data.font_preferences
            console.print(
                f"Font: {escape(prefs.font)} "
                f"(size {prefs.font_size}, bold level {prefs.bold_level})"
            )
        counts = count_annotations(data)
        if counts:
            console.print("\n[bold]Annotations:[/bold]")
            for note_type, count in counts.items():
                console.print(f"  {note_type.name.lower()}: {count}")
        if data.annotation_cache:
            for note_type, note in find_misfiled_notes(data.annotation_cache):
                console.print(
                    f"⚠ {type(note).__name__} stored under {note_type.name.lower()}",
                    style="yellow",
                )
    elif isinstance(data, TimerDataFile):
        if data.book_info_store:
            store = data.book_info_store
            console.print(f"Words: {store.num_words}, read: {store.percent_of_book:.1f}%")
        if data.timer_model:
            model = data.timer_model
            minutes = model.total_time / 60000
            console.print(f"Reading time: {minutes:.0f} min, words read: {model.total_words}")
        if data.page_history_store:
            console.print(f"Page history entries: {len(data.page_history_store)}")

    if data.extra_fields:
        names = ", ".join(obj.name for obj in data.extra_fields)
        console.print(f"\nUnknown fields kept: {escape(names)}", style="yellow")
    console.print()


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--type",
    "note_type",
    type=click.Choice(["bookmark", "highlight", "typed", "handwritten", "sticky"]),
    default=None,
    help="Only show one annotation type",
)
def notes(path: str, note_type: str | None) -> None:
    """List the annotations of a reader data file."""
    result = _load(path, FileKind.READER.value)
    cache = result.data.annotation_cache or {}

    rows = [
        (key, note)
        for key, entries in cache.items()
        if note_type is None or key.name.lower() == note_type
        for note in entries
    ]
    if not rows:
        console.print("No annotations found", style="yellow")
        return

    table = Table(title=f"Annotations ({len(rows)})")
    table.add_column("Type", style="cyan")
    table.add_column("Start", style="white")
    table.add_column("End", style="white")
    table.add_column("Created", style="magenta")
    table.add_column("Modified", style="magenta")
    table.add_column("Content", style="yellow")

    for key, note in rows:
        table.add_row(
            key.name.lower(),
            escape(note.data.start),
            escape(note.data.end),
            format_timestamp(note.data.created),
            format_timestamp(note.data.modified),
            escape(preview(note.data.content, Config.NOTE_PREVIEW_LENGTH)),
        )
    console.print(table)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write JSON to a file")
@kind_option
def dump(path: str, output: str | None, kind: str | None) -> None:
    """Dump a decoded file as JSON."""
    result = _load(path, kind)
    content = KRDSService.dump_json(result.data)

    if output:
        Config.expand_path(output).write_text(content + "\n", encoding="utf-8")
        console.print(f"✓ Wrote {escape(output)}", style="green")
    else:
        click.echo(content)


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@kind_option
@click.pass_context
def verify(ctx: click.Context, paths: tuple[str, ...], kind: str | None) -> None:
    """Check that files survive a decode/encode round trip unchanged."""
    failures = 0
    for path in paths:
        result = KRDSService.verify(path, FileKind(kind) if kind else None)
        if result.success:
            if not ctx.obj.get("quiet"):
                console.print(f"✓ {escape(path)}: {result.message}", style="green")
        else:
            failures += 1
            console.print(
                f"✗ {escape(path)}: {result.message}: {escape(result.error)}", style="red"
            )

    if failures:
        console.print(f"\n{failures} of {len(paths)} file(s) failed", style="red")
        raise click.Abort()


def _add_values(node: Tree, values: list[Value]) -> None:
    for value in values:
        if isinstance(value, KRDSObject):
            _add_values(node.add(f"[bold cyan]{escape(value.name)}[/bold cyan]"), value.values)
        else:
            node.add(f"[dim]{value.kind}[/dim] {escape(repr(value.value))}")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def tree(path: str) -> None:
    """Show the raw value tree, without interpreting any field."""
    result = KRDSService.load_tree(path)
    if not result.success:
        console.print(f"✗ {result.message}: {escape(result.error)}", style="red")
        raise click.Abort()

    root = Tree(f"[bold]{escape(path)}[/bold]")
    _add_values(root, result.objects)
    console.print(root)


if __name__ == "__main__":
    main()
