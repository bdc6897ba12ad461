"""ScaffoldService — create a new guide skeleton from templates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from guidectl.config.discovery import CONFIG_FILENAME
from guidectl.domain.slugs import slugify
from guidectl.infrastructure.filesystem import write_text
from guidectl.infrastructure.templates import build_template_environment
from guidectl.services.base import BaseService
from guidectl.services.result import ServiceResult, failure
from guidectl.services.telemetry import traced

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_CHAPTERS: tuple[str, ...] = (
    "Schemas",
    "Validations",
    "Querying",
    "Data Changes",
    "Callbacks",
)


class ScaffoldService(BaseService):
    """Writes ``guidectl.toml``, a root README, and one stub per chapter."""

    @traced
    def init(
        self,
        *,
        root: Path | None = None,
        title: str | None = None,
        chapters: list[str] | None = None,
        force: bool = False,
    ) -> ServiceResult:
        target = (root or self._guide.root).resolve()
        settings = self._guide.settings
        guide_title = title or settings.guide.title
        chapter_titles = [c.strip() for c in (chapters or DEFAULT_CHAPTERS) if c.strip()]
        entries = [{"title": c, "file": f"{slugify(c)}.md"} for c in chapter_titles]

        context: dict[str, Any] = {
            "title": guide_title,
            "chapters": entries,
            "left": settings.compare.left,
            "right": settings.compare.right,
            "left_label": settings.compare.left_label,
            "right_label": settings.compare.right_label,
        }

        env = build_template_environment("guide", guide_root=target)
        files: dict[str, str] = {
            CONFIG_FILENAME: env.get_template("guidectl.toml.j2").render(**context),
            "README.md": env.get_template("README.md.j2").render(**context),
        }
        chapter_template = env.get_template("chapter.md.j2")
        for entry in entries:
            files[entry["file"]] = chapter_template.render(chapter=entry, **context)

        existing = sorted(name for name in files if (target / name).exists())
        if existing and not force:
            return failure(
                "init",
                "ALREADY_EXISTS",
                f"Refusing to overwrite {', '.join(existing)} (use --force)",
                files=existing,
            )

        for name, content in files.items():
            write_text(target / name, content)

        warnings: list[str] = []
        self._dispatch_event(
            "post_init",
            {"title": guide_title, "chapters": [e["file"] for e in entries]},
            warnings,
        )
        return ServiceResult(
            ok=True,
            op="init",
            data={
                "root": str(target),
                "title": guide_title,
                "files": list(files),
                "count": len(files),
                "overwritten": existing,
            },
            warnings=warnings,
        )
