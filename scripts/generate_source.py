"""
Synthetic source tree generator for shaker.

Writes a deterministic pseudo-random mana source tree (one directory per
entry with ``metadata.json`` and optional ``theory/<lang>.md`` files) and can
render it straight away. Useful for exercising deep hierarchies, wide sibling
groups (``1.10`` after ``1.9``) and concurrent rendering.
"""

from __future__ import annotations

import json
import random
import sys
import time
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import typer

from shaker.config import SUPPORTED_LANGUAGES
from shaker.orchestrator import run

app = typer.Typer(help="Generate a synthetic mana source tree and optionally render it.")

WORDS = [
    "algebra",
    "limits",
    "vectors",
    "matrices",
    "series",
    "integrals",
    "geometry",
    "probability",
    "functions",
    "equations",
    "sets",
    "logic",
]


def _ordinals(sections: int, breadth: int, depth: int) -> Iterator[str]:
    """Pre-order walk of a complete tree: ``sections`` roots, ``breadth`` children per node."""

    def _walk(prefix: str, level: int) -> Iterator[str]:
        yield prefix
        if level >= depth:
            return
        for n in range(1, breadth + 1):
            yield from _walk(f"{prefix}.{n}", level + 1)

    for s in range(1, sections + 1):
        yield from _walk(str(s), 1)


def _title(rng: random.Random, ordinal: str) -> str:
    # slugify drops digits; spelling them as letters keeps slugs unique.
    suffix = "-".join(
        "".join(chr(ord("a") + int(d)) for d in segment) for segment in ordinal.split(".")
    )
    return f"{rng.choice(WORDS).capitalize()} {suffix}"


def _generate_tree(
    root: Path,
    sections: int,
    breadth: int,
    depth: int,
    seed: int,
    langs: Tuple[str, ...] = SUPPORTED_LANGUAGES,
) -> List[str]:
    rng = random.Random(seed)
    root.mkdir(parents=True, exist_ok=True)
    (root / "assets").mkdir(exist_ok=True)
    written: List[str] = []

    for ordinal in _ordinals(sections, breadth, depth):
        entry = root / ordinal
        entry.mkdir()
        items = []
        for lang in langs:
            title = _title(rng, ordinal)
            item = {"lang": lang, "name": f"{title} ({lang})"}
            if rng.random() < 0.5:
                item["desc"] = f"Inline notes on {title.lower()}."
            else:
                theory = entry / "theory"
                theory.mkdir(exist_ok=True)
                (theory / f"{lang}.md").write_text(
                    f"Theory of {title.lower()}.\n", encoding="utf-8"
                )
            items.append(item)

        meta = {
            "number": ordinal,
            "difficulty": rng.randint(1, 5),
            "data": items,
        }
        if "." in ordinal:
            meta["parent"] = ordinal.rsplit(".", 1)[0]
        (entry / "metadata.json").write_text(json.dumps(meta, indent=2), encoding="utf-8")
        written.append(ordinal)

    return written


@app.command()
def main(
    output: Path = typer.Option(..., "--output", "-o", help="Directory for the source tree."),
    sections: int = typer.Option(3, "--sections", "-s", min=1, help="Top-level sections."),
    breadth: int = typer.Option(4, "--breadth", "-b", min=1, help="Children per node."),
    depth: int = typer.Option(3, "--depth", "-d", min=1, help="Levels including sections."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    render: Optional[Path] = typer.Option(
        None, "--render", help="Also render the generated tree into this directory."
    ),
    lang: str = typer.Option("en", "--lang", help="Language used when rendering."),
) -> None:
    """
    Generate a synthetic source tree and optionally render it.
    """
    start = time.perf_counter()
    ordinals = _generate_tree(output, sections, breadth, depth, seed)
    typer.echo(
        f"Generated {len(ordinals):,} entries -> {output} in {time.perf_counter() - start:.2f}s"
    )

    if render is None:
        return

    summary = run(output, render, lang=lang)
    typer.echo(
        f"Rendered {summary.documents:,} documents in {len(summary.sections)} sections -> {render}"
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
