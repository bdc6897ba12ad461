"""Human-readable rendering of ServiceResult, one function per ``op``.

``render_result`` picks a renderer from ``_OP_RENDERERS`` (falling back
to a plain key/value dump), draws into a StringIO-backed console and
returns the text. ``render_quiet`` is the ``-q`` variant: bare
identifiers a shell loop can consume.

Guide content (titles, messages, code) goes into ``Text``/``Syntax``
objects and is never interpolated into console markup: Markdown headings
routinely contain square brackets.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from guidectl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from guidectl.services.result import ServiceResult

_PATH_FIELDS = frozenset({"path", "output_dir", "root", "backup"})


# ── Entry points ──────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Rich text for *result*; ANSI codes only when writing to a terminal."""
    console = create_console()
    if not result.ok:
        _render_error(result, console, verbose=verbose)
    else:
        _OP_RENDERERS.get(result.op, _render_generic)(result, console, verbose=verbose)
        if verbose and result.meta:
            _render_meta(console, result.meta)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """``-q`` output: one path, location, or issue per line."""
    if not result.ok:
        message = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {message}"

    data = result.data
    match result.op:
        case "check":
            lines = [
                f"{i['path']}:{i.get('line') or 0}: {i['severity']} {i['code']}"
                for i in data.get("issues", [])
            ]
        case "list_chapters" | "toc":
            entries = data.get("items") or data.get("chapters") or []
            lines = [str(entry["path"]) for entry in entries]
        case "search":
            lines = [_location(hit) for hit in data.get("items", [])]
        case "pairs":
            lines = [_location(pair) for pair in data.get("pairs", [])]
        case "build":
            lines = list(data.get("pages", []))
        case "show":
            lines = [str(data.get("body", ""))]
        case _:
            lines = [f"OK: {result.op}"]
    return "\n".join(lines)


# ── Shared pieces ─────────────────────────────────────────────────────


def _location(item: dict[str, Any]) -> str:
    anchor = item.get("anchor") or item.get("section")
    return f"{item['path']}#{anchor}" if anchor else str(item["path"])


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "guide.ok"), (f"  {result.op}", "guide.op")))


def _field(console: Console, key: str, value: Any) -> None:
    style = "guide.path" if key in _PATH_FIELDS else ""
    console.print(Text.assemble((f"  {key}: ", "guide.key"), (str(value), style)))


def _timing_style(duration_ms: float) -> str:
    if duration_ms > 1000:
        return "bold red"
    return "yellow" if duration_ms > 100 else "dim"


def _span_tree(span: dict[str, Any], parent: Tree | None = None) -> Tree:
    """Nest a ``meta["telemetry"]`` span dict into a rich Tree."""
    duration = float(span.get("duration_ms", 0.0))
    label = Text.assemble(
        (f"{duration:.2f}ms", _timing_style(duration)), f"  {span.get('name', '?')}"
    )
    notes = span.get("annotations") or {}
    if notes:
        label.append("  " + " ".join(f"{k}={v}" for k, v in notes.items()), style="dim")
    node = Tree(label, guide_style="dim") if parent is None else parent.add(label)
    for child in span.get("children", []):
        _span_tree(child, node)
    return node


def _render_meta(console: Console, meta: dict[str, Any]) -> None:
    console.print()
    for key, value in meta.items():
        if key == "telemetry" and isinstance(value, dict):
            console.print(_span_tree(value))
        else:
            _field(console, key, value)


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    error = result.error
    message = error.message if error else "Unknown error"
    console.print(
        Text.assemble(("ERROR", "guide.error"), (f"  {result.op}", "guide.op"), f": {message}")
    )
    if not (verbose and error):
        return
    _field(console, "code", error.code)
    if error.detail:
        console.print(Text("  detail:", style="guide.key"))
        for key, value in error.detail.items():
            console.print(Text(f"    {key}: {value}"))


# ── Check renderers ───────────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render lint issues grouped by file."""
    issues = result.data.get("issues", [])
    if not issues:
        console.print(Text.assemble(("OK", "guide.ok"), "  No issues found."))
        _field(console, "documents", result.data.get("documents", 0))
        return

    severity_styles = {"error": "guide.error", "warning": "guide.warning"}
    by_path: dict[str, list[dict[str, Any]]] = {}
    for issue in issues:
        by_path.setdefault(str(issue.get("path", "?")), []).append(issue)

    for path, path_issues in by_path.items():
        console.print()
        console.print(Text(path, style="guide.path"))
        for issue in path_issues:
            sev = str(issue.get("severity", "warning"))
            line = Text("  ")
            line.append(f"{issue.get('line') or '-':>4}", style="guide.line")
            line.append("  ")
            line.append(f"{sev:<7}", style=severity_styles.get(sev, ""))
            line.append(f" {issue.get('message', '')}")
            line.append(f"  [{issue.get('code', '')}]", style="dim")
            console.print(line)
            if verbose and issue.get("fix_action"):
                console.print(Text(f"          fix: {issue['fix_action']}", style="dim"))

    errors = result.data.get("error_count", 0)
    warnings = result.data.get("warning_count", 0)
    console.print()
    console.print(Text(f"{errors} errors, {warnings} warnings"))


def _render_fix(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "fixes_applied", result.data.get("count", 0))
    if result.data.get("backup"):
        _field(console, "backup", result.data["backup"])
    for fix in result.data.get("fixes", []) if verbose else []:
        console.print(Text(f"  - {fix}"))


def _render_rollback(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "backup", result.data.get("backup", ""))
    _field(console, "restored", result.data.get("count", 0))
    for rel in result.data.get("restored", []) if verbose else []:
        console.print(Text(f"  - {rel}", style="guide.path"))


# ── Navigation renderers ──────────────────────────────────────────────


def _render_toc(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the table of contents as a tree."""
    tree = Tree(Text(str(result.data.get("title", "")), style="guide.title"))

    def add_headings(node: Tree, headings: list[dict[str, Any]]) -> None:
        for heading in headings:
            label = Text(heading["text"])
            if verbose:
                label.append(f"  #{heading['anchor']}", style="guide.anchor")
            add_headings(node.add(label), heading.get("children", []))

    for chapter in result.data.get("chapters", []):
        label = Text.assemble(
            (chapter["title"], "guide.title"), "  ", (chapter["path"], "guide.path")
        )
        add_headings(tree.add(label), chapter.get("headings", []))
    console.print(tree)


def _render_chapters(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Path", style="guide.path", no_wrap=True)
    table.add_column("Title", style="guide.title")
    table.add_column("Headings", justify="right")
    table.add_column("Code", justify="right")
    if verbose:
        table.add_column("Links", justify="right")
    for item in items:
        row = [
            str(item.get("position", "")),
            str(item.get("path", "")),
            str(item.get("title", "")),
            str(item.get("headings", 0)),
            str(item.get("code_blocks", 0)),
        ]
        if verbose:
            row.append(str(item.get("links", 0)))
        table.add_row(*row)
    console.print(table)
    console.print(Text(f"\n{result.data.get('count', len(items))} chapters"))


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a chapter or section as Markdown with prev/next navigation."""
    d = result.data
    location = d.get("path", "")
    if d.get("anchor"):
        location = f"{location}#{d['anchor']}"
    console.print(Panel(Text(str(d.get("heading", ""))), title=Text(location), expand=False))
    console.print(Markdown(str(d.get("body", ""))))

    nav = Text()
    if d.get("prev"):
        nav.append(f"← {d['prev']['title']} ({d['prev']['path']})", style="dim")
    if d.get("next"):
        if nav:
            nav.append("   ")
        nav.append(f"{d['next']['title']} ({d['next']['path']}) →", style="dim")
    if nav:
        console.print()
        console.print(nav)


def _render_search(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Location", style="guide.path", no_wrap=True)
    table.add_column("Heading", style="guide.title")
    table.add_column("Score", style="guide.score", justify="right")
    table.add_column("Excerpt")
    for item in items:
        table.add_row(
            _location(item),
            str(item.get("heading", "")),
            str(item.get("score", "")),
            str(item.get("snippet", "")),
        )
    console.print(table)
    total = result.data.get("total", len(items))
    console.print(Text(f"\n{len(items)} of {total} sections"))


def _render_pairs(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render each translation pair as a two-column table."""
    left = str(result.data.get("left", ""))
    right = str(result.data.get("right", ""))
    for pair in result.data.get("pairs", []):
        table = Table(
            title=Text(f"{_location(pair)}  {pair.get('heading', '')}".rstrip()),
            show_header=True,
            expand=True,
        )
        table.add_column(f"{left} (line {pair['left']['line']})", ratio=1)
        table.add_column(f"{right} (line {pair['right']['line']})", ratio=1)
        table.add_row(
            Syntax(pair["left"]["code"].rstrip("\n"), left, word_wrap=True),
            Syntax(pair["right"]["code"].rstrip("\n"), right, word_wrap=True),
        )
        console.print(table)

    for block in result.data.get("unpaired", []):
        line = Text("unpaired ", style="guide.warning")
        line.append(f"{block['side']} {block['language']} at {block['path']}:{block['line']}")
        console.print(line)

    console.print(
        Text(
            f"\n{result.data.get('count', 0)} pairs, "
            f"{result.data.get('unpaired_count', 0)} unpaired blocks"
        )
    )


# ── Build renderers ───────────────────────────────────────────────────


def _render_build(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "output_dir", result.data.get("output_dir", ""))
    _field(console, "pages", result.data.get("count", 0))
    if result.data.get("assets"):
        _field(console, "assets", len(result.data["assets"]))
    for page in result.data.get("pages", []) if verbose else []:
        console.print(Text(f"  - {page}", style="guide.path"))


def _render_init(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "root", result.data.get("root", ""))
    _field(console, "title", result.data.get("title", ""))
    for name in result.data.get("files", []):
        console.print(Text(f"  + {name}", style="guide.path"))


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS: dict[str, Any] = {
    # Check
    "check": _render_check,
    "fix": _render_fix,
    "rollback": _render_rollback,
    # Navigation
    "toc": _render_toc,
    "list_chapters": _render_chapters,
    "show": _render_show,
    "search": _render_search,
    "pairs": _render_pairs,
    # Output
    "build": _render_build,
    "init": _render_init,
}
