"""
Orchestrator for a full shaker run: ingest a source tree, then render it.

Usage (example from CLI):
    from shaker.orchestrator import run

    summary = run("mana/src", "content", lang="en")
    print(summary.as_dict())

The cache is populated to completion before any rendering starts. Each
section is then written into its own directory under the output path:

- ``<output>/<section-slug>/index.md`` for the section itself
- ``<output>/<section-slug>/<slug>.md`` for every descendant
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from shaker.config import get_settings
from shaker.domain.models import Record
from shaker.infrastructure.db_factory import connect
from shaker.ingestion import read_entries
from shaker.renderer import TreeRenderer
from shaker.store import RecordStore
from shaker.utils.logging import get_logger
from shaker.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)


@dataclass(frozen=True)
class SectionResult:
    ordinal: str
    slug: str
    title: str
    documents: int


@dataclass
class RunSummary:
    cache: str
    lang: str
    inserted: int = 0
    skipped: List[str] = field(default_factory=list)
    sections: List[SectionResult] = field(default_factory=list)
    phases: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @property
    def documents(self) -> int:
        return sum(section.documents for section in self.sections)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "cache": self.cache,
            "lang": self.lang,
            "inserted": self.inserted,
            "skipped": list(self.skipped),
            "documents": self.documents,
            "sections": [
                {
                    "ordinal": s.ordinal,
                    "slug": s.slug,
                    "title": s.title,
                    "documents": s.documents,
                }
                for s in self.sections
            ],
            "phases": self.phases,
        }


def _render_section(renderer: TreeRenderer, section: Record, output: Path) -> SectionResult:
    directory = output / section.slug
    directory.mkdir()
    log.info(f"[SECTION START] {section.ordinal} {section.title}", extra={"ordinal": section.ordinal})
    documents = renderer.write_tree(section, directory)
    log.info(
        f"[SECTION DONE] {section.ordinal}",
        extra={"ordinal": section.ordinal, "documents": documents},
    )
    return SectionResult(
        ordinal=section.ordinal, slug=section.slug, title=section.title, documents=documents
    )


def render_sections(
    renderer: TreeRenderer,
    sections: Iterable[Record],
    output: Path,
    concurrency: int = 1,
) -> List[SectionResult]:
    """
    Write every section subtree under ``output``.

    With ``concurrency > 1`` sections are rendered by a thread pool; every
    store call checks out its own pooled connection. A failing section does
    not stop the others, but the first failure is raised once all are done.
    """
    sections = list(sections)
    nested = [section.ordinal for section in sections if not section.is_section]
    if nested:
        raise ValueError(f"Not top-level sections: {', '.join(nested)}")
    if concurrency <= 1 or len(sections) <= 1:
        return [_render_section(renderer, section, output) for section in sections]

    results: List[SectionResult] = []
    first_error: Optional[BaseException] = None
    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="shaker-render") as pool:
        futures: List[Future[SectionResult]] = [
            pool.submit(_render_section, renderer, section, output) for section in sections
        ]
        for section, future in zip(sections, futures):
            try:
                results.append(future.result())
            except Exception as exc:
                log.exception(
                    f"[SECTION FAILED] {section.ordinal}", extra={"ordinal": section.ordinal}
                )
                if first_error is None:
                    first_error = exc

    if first_error is not None:
        raise first_error
    return results


def _phase(stats: ProfileStats, **extra: Any) -> Dict[str, Any]:
    stats.extra.update(extra)
    return stats.as_dict()


def run(
    input_path: Path | str,
    output_path: Path | str,
    lang: Optional[str] = None,
    cache_path: Optional[str] = None,
    fallback_lang: Optional[str] = None,
    excluded_names: Optional[Iterable[str]] = None,
    concurrency: Optional[int] = None,
) -> RunSummary:
    """
    Ingest ``input_path`` and render it into ``output_path``.

    Parameters
    ----------
    input_path : Path | str
        Source tree with one directory per entry.
    output_path : Path | str
        Output directory. Must not exist yet.
    lang : str | None
        Target language. Defaults to settings.lang.
    cache_path : str | None
        ``":memory:"`` or a SQLite file path. Defaults to settings.cache_path.
    fallback_lang : str | None
        Language used for entries without an item in ``lang``.
    excluded_names : iterable[str] | None
        Entry names to ignore. Defaults to settings.excluded_names.
    concurrency : int | None
        Number of sections rendered in parallel. Defaults to
        settings.render_concurrency.

    Returns
    -------
    RunSummary
        Counts of inserted/skipped entries, documents per section and phase
        timings.
    """
    settings = get_settings()
    effective_lang = lang or settings.lang
    effective_cache = cache_path or settings.cache_path
    effective_fallback = fallback_lang if fallback_lang is not None else settings.fallback_lang
    effective_excluded = (
        list(excluded_names) if excluded_names is not None else list(settings.excluded_names)
    )
    workers = concurrency or settings.render_concurrency
    output = Path(output_path)

    summary = RunSummary(cache=effective_cache, lang=effective_lang)
    log.info(
        "[RUN START]",
        extra={
            "input": str(input_path),
            "output": str(output),
            "lang": effective_lang,
            "cache": effective_cache,
            "concurrency": workers,
        },
    )

    with connect(effective_cache, max_size=max(settings.pool_max_size, workers)) as pool:
        store = RecordStore(pool)

        with profile_block("ingest") as ingest_stats:
            report = read_entries(
                store,
                input_path,
                excluded_names=effective_excluded,
                lang=effective_lang,
                fallback_lang=effective_fallback,
            )
        summary.inserted = report.inserted
        summary.skipped = list(report.skipped)
        summary.phases["ingest"] = _phase(ingest_stats, records=store.count())

        sections = store.sections()
        output.mkdir()
        renderer = TreeRenderer(store)
        with profile_block("render") as render_stats:
            summary.sections = render_sections(renderer, sections, output, workers)
        summary.phases["render"] = _phase(render_stats, documents=summary.documents)

    log.info(
        "[RUN COMPLETE]",
        extra={
            "inserted": summary.inserted,
            "skipped": len(summary.skipped),
            "sections": len(summary.sections),
            "documents": summary.documents,
        },
    )
    return summary


__all__ = ["RunSummary", "SectionResult", "render_sections", "run"]
