"""Filesystem operations for guide content.

INVARIANT: Files are truth. Nothing guidectl derives (documents, the link
graph, the built site) is ever persisted as a source; every invocation
re-reads the Markdown files.
"""

from __future__ import annotations

import codecs
import fnmatch
import shutil
from collections.abc import Iterable
from pathlib import Path

# Directories to skip when discovering guide files.
_SKIP_DIRS = frozenset({".git", ".guidectl", ".venv", "node_modules", "__pycache__"})

MARKDOWN_SUFFIXES = frozenset({".md", ".markdown"})


def to_posix(root: Path, path: Path) -> str:
    """Root-relative POSIX key for *path*."""
    return path.relative_to(root).as_posix()


def _excluded(rel_path: str, patterns: Iterable[str]) -> bool:
    return any(
        fnmatch.fnmatch(rel_path, pattern) or rel_path.startswith(pattern.rstrip("/") + "/")
        for pattern in patterns
    )


def find_guide_files(
    root: Path,
    *,
    exclude: Iterable[str] = (),
) -> list[Path]:
    """Discover all Markdown files under *root*.

    Skips VCS, tool, and dependency directories plus any root-relative
    glob in *exclude* (the build output directory is passed here too).
    """
    patterns = list(exclude)
    results: list[Path] = []
    for path in root.rglob("*"):
        if not path.is_file() or path.suffix.lower() not in MARKDOWN_SUFFIXES:
            continue
        rel = path.relative_to(root)
        if any(part in _SKIP_DIRS for part in rel.parts[:-1]):
            continue
        if _excluded(rel.as_posix(), patterns):
            continue
        results.append(path)
    return sorted(results)


def read_text(path: Path) -> str:
    """Read a guide file as UTF-8 (a BOM is tolerated)."""
    return path.read_text(encoding="utf-8-sig")


def has_bom(path: Path) -> bool:
    with path.open("rb") as fh:
        return fh.read(len(codecs.BOM_UTF8)) == codecs.BOM_UTF8


def write_text(path: Path, content: str, *, bom: bool = False) -> None:
    """Write *content* as UTF-8, creating parent directories as needed.

    With *bom* the file starts with a byte-order mark, so a file read by
    :func:`read_text` can be written back unchanged.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8-sig" if bom else "utf-8")


def copy_file(src: Path, dest: Path) -> None:
    """Copy *src* to *dest* with metadata, creating parent directories."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(str(src), str(dest))
