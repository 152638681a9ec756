"""CLI interface for blogmatter."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from blogmatter.config import BlogmatterConfig, load_config, merge_cli_overrides
from blogmatter.content.errors import FrontMatterError
from blogmatter.content.lint import Severity, lint_record
from blogmatter.content.parser import parse_record, serialize_record
from blogmatter.content.reader import ContentReader

app = typer.Typer(
    name="blogmatter",
    help="Validate and inspect front matter in Markdown blog posts.",
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from blogmatter import __version__

        console.print(f"blogmatter {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .blogmatter.toml file."),
    ] = None,
    allow_naive: Annotated[
        Optional[bool],
        typer.Option(
            "--allow-naive/--require-offset",
            help="Accept timestamps without a UTC offset, assuming the default timezone.",
        ),
    ] = None,
    content_dir: Annotated[
        Optional[str],
        typer.Option("--content-dir", help="Content directory used by list."),
    ] = None,
    timezone: Annotated[
        Optional[str],
        typer.Option("--timezone", help="Timezone assumed for naive timestamps."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log progress to stderr."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """blogmatter - front-matter tooling for a static blog."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )

    try:
        config = load_config(config_path)
        config = merge_cli_overrides(
            config,
            content_directory=content_dir,
            require_offset=None if allow_naive is None else not allow_naive,
            default_timezone=timezone,
        )
    except ValidationError as exc:
        console.print("[red]Error:[/red] Invalid configuration", soft_wrap=True)
        for error in exc.errors():
            where = ".".join(str(part) for part in error["loc"])
            console.print(f"  {escape(where)}: {escape(error['msg'])}", soft_wrap=True)
        raise typer.Exit(2) from None
    ctx.obj = config


def _config(ctx: typer.Context) -> BlogmatterConfig:
    return ctx.obj if isinstance(ctx.obj, BlogmatterConfig) else BlogmatterConfig()


def _expand(paths: list[Path], reader: ContentReader) -> list[Path]:
    """Resolve directories into their content files, keeping file order."""
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(reader.discover(path))
        elif path.exists():
            files.append(path)
        else:
            console.print(f"[red]Error:[/red] No such file or directory: {escape(str(path))}")
            raise typer.Exit(2)
    return files


def _report_failure(path: Path, exc: Exception) -> None:
    message = exc.message if isinstance(exc, FrontMatterError) else str(exc)
    console.print(
        f"[red]✗[/red] {escape(str(path))}: [bold]{type(exc).__name__}[/bold] {escape(message)}",
        soft_wrap=True,
    )


@app.command()
def validate(
    ctx: typer.Context,
    paths: Annotated[
        list[Path],
        typer.Argument(help="Files or directories to validate."),
    ],
) -> None:
    """Validate front matter; exits 1 if any document is invalid."""
    reader = _config(ctx).to_reader()
    files = _expand(paths, reader)

    failed = 0
    for path in files:
        try:
            reader.read_file(path)
        except (FrontMatterError, OSError, UnicodeDecodeError) as exc:
            failed += 1
            _report_failure(path, exc)
        else:
            logger.debug("Valid: %s", path)

    valid = len(files) - failed
    colour = "red" if failed else "green"
    console.print(f"[{colour}]{valid} valid, {failed} invalid[/{colour}]")
    if failed:
        raise typer.Exit(1)


@app.command()
def show(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Document to display.", exists=True, dir_okay=False)],
    as_json: Annotated[bool, typer.Option("--json", help="Print the record as JSON.")] = False,
) -> None:
    """Print a parsed record."""
    config = _config(ctx)
    reader = config.to_reader()
    try:
        record = reader.read_file(file)
    except (FrontMatterError, OSError, UnicodeDecodeError) as exc:
        _report_failure(file, exc)
        raise typer.Exit(1) from None

    if as_json:
        typer.echo(record.model_dump_json(indent=2))
        return

    table = Table(show_header=False, box=None)
    table.add_column("field", style="bold")
    table.add_column("value", overflow="fold")
    table.add_row("title", escape(record.title))
    table.add_row("description", escape(record.description))
    table.add_row("date", record.date.isoformat())
    table.add_row("lastmod", record.lastmod.isoformat() if record.lastmod else "")
    table.add_row("draft", str(record.draft).lower())
    table.add_row("author", escape(record.author))
    table.add_row("categories", escape(", ".join(record.categories)))
    table.add_row("tags", escape(", ".join(record.tags)))
    for key, value in record.extra.items():
        table.add_row(escape(key), escape(repr(value)))
    console.print(table)

    blocks = record.code_blocks()
    languages = sorted({b.language for b in blocks if b.language})
    console.print(
        f"\n{len(record.body.splitlines())} body lines, {len(blocks)} code blocks"
        + (f" ({', '.join(languages)})" if languages else "")
    )
    for embed in record.video_embeds(config.shortcodes.video):
        console.print(
            f"video: {embed.provider} {escape(embed.video_id)} {escape(embed.label)}",
            soft_wrap=True,
        )


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    directory: Annotated[
        Optional[Path],
        typer.Argument(help="Content directory. Defaults to [content] directory."),
    ] = None,
    drafts: Annotated[bool, typer.Option("--drafts", help="Include drafts.")] = False,
) -> None:
    """List records sorted by date."""
    config = _config(ctx)
    directory = directory or Path(config.content.directory)
    if not directory.is_dir():
        console.print(f"[red]Error:[/red] Not a directory: {escape(str(directory))}")
        raise typer.Exit(2)

    result = config.to_reader().read_all(directory)
    loaded = result.records if drafts else result.published()

    table = Table(title=f"{len(loaded)} posts")
    table.add_column("Date", no_wrap=True)
    table.add_column("Title")
    table.add_column("Tags")
    if drafts:
        table.add_column("Draft")
    for item in loaded:
        row = [
            item.record.date.date().isoformat(),
            escape(item.record.title),
            escape(", ".join(item.record.tags)),
        ]
        if drafts:
            row.append("yes" if item.record.draft else "")
        table.add_row(*row)
    console.print(table)

    if result.failures:
        console.print(f"[yellow]{len(result.failures)} file(s) skipped; run validate for details[/yellow]")


@app.command()
def lint(
    ctx: typer.Context,
    paths: Annotated[list[Path], typer.Argument(help="Files or directories to lint.")],
) -> None:
    """Report convention issues; exits 1 only if a document fails to parse."""
    config = _config(ctx)
    reader = config.to_reader()
    files = _expand(paths, reader)

    failed = 0
    issue_count = 0
    for path in files:
        try:
            record = reader.read_file(path)
        except (FrontMatterError, OSError, UnicodeDecodeError) as exc:
            failed += 1
            _report_failure(path, exc)
            continue
        for issue in lint_record(record, video_shortcodes=config.shortcodes.video):
            issue_count += 1
            colour = "yellow" if issue.severity is Severity.WARNING else "blue"
            where = f"{path}:{issue.line}" if issue.line is not None else str(path)
            console.print(
                f"[{colour}]{issue.severity}[/{colour}] {escape(where)} "
                f"{issue.code}: {escape(issue.message)}",
                soft_wrap=True,
            )

    console.print(f"{issue_count} issue(s) in {len(files)} file(s)")
    if failed:
        raise typer.Exit(1)


@app.command()
def fmt(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Document to rewrite.", exists=True, dir_okay=False)],
    check: Annotated[
        bool,
        typer.Option("--check", help="Exit 1 if the file is not in canonical form; write nothing."),
    ] = False,
) -> None:
    """Rewrite a document's front matter in canonical YAML form."""
    options = _config(ctx).to_parse_options()
    try:
        # newline="" keeps CRLF files byte-comparable
        with open(file, encoding="utf-8", newline="") as f:
            text = f.read()
        record = parse_record(text, options=options)
    except (FrontMatterError, OSError, UnicodeDecodeError) as exc:
        _report_failure(file, exc)
        raise typer.Exit(1) from None

    canonical = serialize_record(record)
    if text.splitlines(keepends=True)[0].endswith("\r\n"):
        canonical = canonical.replace("\r\n", "\n").replace("\n", "\r\n")
    if canonical == text:
        console.print(f"{escape(str(file))} already formatted", soft_wrap=True)
        return
    if check:
        console.print(f"[yellow]would reformat[/yellow] {escape(str(file))}", soft_wrap=True)
        raise typer.Exit(1)

    file.write_text(canonical, encoding="utf-8", newline="")
    console.print(f"reformatted {escape(str(file))}", soft_wrap=True)


if __name__ == "__main__":
    app()
