from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer

from shaker.config import SUPPORTED_LANGUAGES, get_settings
from shaker.exceptions import ShakerError
from shaker.infrastructure.db_factory import connect
from shaker.ingestion import read_entries
from shaker.orchestrator import run
from shaker.renderer import MemoryWriter, TreeRenderer
from shaker.reporter import print_summary
from shaker.store import RecordStore
from shaker.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Render a mana source tree as cross-linked Markdown.")
log = get_logger(__name__)


def _check_lang(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in SUPPORTED_LANGUAGES:
        raise typer.BadParameter(f"must be one of: {', '.join(SUPPORTED_LANGUAGES)}")
    return value


def _fail(exc: Exception) -> NoReturn:
    log.debug("Run failed", exc_info=exc)
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"cache={settings.cache_path} lang={settings.lang} "
        f"fallback={settings.fallback_lang or '-'} "
        f"excluded={','.join(settings.excluded_names)} "
        f"concurrency={settings.render_concurrency} pool={settings.pool_max_size}"
    )


@app.command()
def build(
    input_path: Path = typer.Option(
        ..., "--input-path", "-i", help="Input directory. Expects a valid mana source."
    ),
    output_path: Path = typer.Option(..., "--output-path", "-o", help="Output directory."),
    cache_path: Optional[str] = typer.Option(
        None,
        "--cache-path",
        "-c",
        help=(
            "Cache strategy. ':memory:' or a SQLite file path, created if missing "
            "and reused if it already exists."
        ),
    ),
    lang: Optional[str] = typer.Option(
        None, "--lang", callback=_check_lang, help="Output language (en, ca, es)."
    ),
    fallback_lang: Optional[str] = typer.Option(
        None,
        "--fallback-lang",
        callback=_check_lang,
        help="Language used for entries missing the output language.",
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", min=1, help="Sections rendered in parallel."
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON."),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON."),
) -> None:
    """
    Ingest the source tree and write one directory per section.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=json_logs or settings.json_logs)
    try:
        summary = run(
            input_path,
            output_path,
            lang=lang,
            cache_path=cache_path,
            fallback_lang=fallback_lang,
            concurrency=concurrency,
        )
    except (ShakerError, OSError) as exc:
        _fail(exc)

    if as_json:
        typer.echo(json.dumps(summary.as_dict(), indent=2))
    else:
        print_summary(summary)


@app.command()
def show(
    ordinal: str = typer.Argument(..., help="Ordinal of the entry to render, e.g. 1.2."),
    input_path: Path = typer.Option(
        ..., "--input-path", "-i", help="Input directory. Expects a valid mana source."
    ),
    lang: Optional[str] = typer.Option(
        None, "--lang", callback=_check_lang, help="Output language (en, ca, es)."
    ),
    fallback_lang: Optional[str] = typer.Option(
        None, "--fallback-lang", callback=_check_lang, help="Fallback language."
    ),
) -> None:
    """
    Render a single entry to stdout without writing any files.
    """
    settings = get_settings()
    configure_logging(level="WARNING", json_logs=settings.json_logs)
    try:
        with connect(max_size=1) as pool:
            store = RecordStore(pool)
            read_entries(
                store,
                input_path,
                excluded_names=settings.excluded_names,
                lang=lang or settings.lang,
                fallback_lang=fallback_lang or settings.fallback_lang,
            )
            renderer = TreeRenderer(store, MemoryWriter())
            document, _ = renderer.render(store.require(ordinal))
    except (ShakerError, OSError) as exc:
        _fail(exc)
    typer.echo(document)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
