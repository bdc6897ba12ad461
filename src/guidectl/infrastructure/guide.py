"""Guide — repository object over a directory of Markdown chapters.

The Guide is the single dependency injected into every service. It owns
document discovery and parsing, the document link graph, and the plugin
manager, and builds each of them lazily so commands only pay for what
they touch:

- **Documents**: parsed once per Guide instance, keyed by root-relative
  POSIX path. Unreadable files are skipped and reported through
  :attr:`Guide.load_warnings`.
- **Graph**: a NetworkX DiGraph with one node per document and one edge
  per internal document-to-document link.
- **Plugins**: entry-point plugins plus ``.guidectl/plugins/*.py``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

import networkx as nx

from guidectl.domain.document import GuideDocument, parse_document
from guidectl.domain.links import resolve_link_path
from guidectl.domain.slugs import slugify
from guidectl.infrastructure.filesystem import find_guide_files, read_text, to_posix

if TYPE_CHECKING:
    from guidectl.config.settings import GuideSettings
    from guidectl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

_Graph: TypeAlias = nx.DiGraph

STATE_DIR = ".guidectl"


class Guide:
    """Lazy-loading view of a guide directory."""

    def __init__(self, settings: GuideSettings) -> None:
        self.settings = settings
        self.root: Path = settings.guide_root.resolve()
        self._documents: dict[str, GuideDocument] | None = None
        self._graph: _Graph | None = None
        self._plugin_manager: PluginManager | None = None
        self.load_warnings: list[str] = []

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def state_dir(self) -> Path:
        return self.root / STATE_DIR

    @property
    def output_dir(self) -> Path:
        return (self.root / self.settings.build.output_dir).resolve()

    @property
    def root_document(self) -> str:
        return Path(self.settings.guide.root_document).as_posix()

    def _exclude_patterns(self) -> list[str]:
        patterns = list(self.settings.guide.exclude)
        if self.output_dir.is_relative_to(self.root) and self.output_dir != self.root:
            patterns.append(to_posix(self.root, self.output_dir))
        return patterns

    def exists(self, rel_path: str) -> bool:
        """Whether a root-relative path names an existing file or directory."""
        if rel_path in self.documents:
            return True
        return (self.root / rel_path).exists()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    @property
    def documents(self) -> dict[str, GuideDocument]:
        """All parsed documents, loaded on first access."""
        if self._documents is None:
            self._documents = self._load_documents()
        return self._documents

    def reload(self) -> None:
        """Drop cached documents and graph (after files were rewritten)."""
        self._documents = None
        self._graph = None
        self.load_warnings = []

    def _load_documents(self) -> dict[str, GuideDocument]:
        docs: dict[str, GuideDocument] = {}
        for path in find_guide_files(self.root, exclude=self._exclude_patterns()):
            rel = to_posix(self.root, path)
            try:
                text = read_text(path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable file %s: %s", rel, exc)
                self.load_warnings.append(f"Skipped {rel}: {exc}")
                continue
            docs[rel] = parse_document(rel, text)
        logger.debug("Loaded %d documents from %s", len(docs), self.root)
        return docs

    def document(self, ref: str) -> GuideDocument | None:
        """Find a document by path, path without suffix, stem, or title."""
        docs = self.documents
        normalized = Path(ref).as_posix().removeprefix("./")
        if normalized in docs:
            return docs[normalized]
        if f"{normalized}.md" in docs:
            return docs[f"{normalized}.md"]

        wanted = slugify(ref)
        for doc in docs.values():
            if doc.stem.lower() == normalized.lower() or slugify(doc.stem) == wanted:
                return doc
        for doc in docs.values():
            if doc.title.lower() == ref.strip().lower() or slugify(doc.title) == wanted:
                return doc
        return None

    # ------------------------------------------------------------------
    # Link graph and reading order
    # ------------------------------------------------------------------

    @property
    def graph(self) -> _Graph:
        """Document link graph, built on first access."""
        if self._graph is None:
            self._graph = self._build_graph()
        return self._graph

    def _build_graph(self) -> _Graph:
        g: _Graph = nx.DiGraph()
        for path, doc in self.documents.items():
            g.add_node(path, title=doc.title)
        for path, doc in self.documents.items():
            for link in doc.links:
                if link.is_external or link.kind != "link" or not link.path:
                    continue
                target = resolve_link_path(path, link.path)
                if target is None or target == path or target not in self.documents:
                    continue
                if not g.has_edge(path, target):
                    g.add_edge(path, target, line=link.line)
        return g

    def reachable_from_root(self) -> set[str]:
        """Documents reachable from the root document (root included)."""
        root = self.root_document
        if root not in self.graph:
            return set()
        return {root} | nx.descendants(self.graph, root)

    def chapter_order(self) -> list[str]:
        """Reading order for every document.

        Configured ``[guide] chapters`` win. Otherwise the root document
        comes first, followed by a breadth-first walk of its links in the
        order they appear. Documents outside either list follow
        alphabetically.
        """
        docs = self.documents
        ordered: list[str] = []

        configured = [self.document(ref) for ref in self.settings.guide.chapters]
        if configured:
            if self.root_document in docs:
                ordered.append(self.root_document)
            for doc in configured:
                if doc is not None and doc.path not in ordered:
                    ordered.append(doc.path)
        elif self.root_document in self.graph:
            ordered.extend(nx.bfs_tree(self.graph, self.root_document))

        ordered.extend(sorted(p for p in docs if p not in ordered))
        return ordered

    def neighbours(self, path: str) -> tuple[str | None, str | None]:
        """``(previous, next)`` documents around *path* in reading order."""
        order = self.chapter_order()
        if path not in order:
            return None, None
        idx = order.index(path)
        prev_path = order[idx - 1] if idx > 0 else None
        next_path = order[idx + 1] if idx + 1 < len(order) else None
        return prev_path, next_path

    # ------------------------------------------------------------------
    # Plugins
    # ------------------------------------------------------------------

    @property
    def plugin_manager(self) -> PluginManager:
        """Plugin manager with entry-point and local plugins loaded."""
        if self._plugin_manager is None:
            from guidectl.plugins.manager import PluginManager

            pm = PluginManager()
            pm.discover_and_load(local_dir=self.state_dir / "plugins")
            self._plugin_manager = pm
        return self._plugin_manager
