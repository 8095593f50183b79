from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .app import InkuApp, ListPresenter, RenderOutcome, StreamPresenter
from .config import load_config
from .errors import InkuUserError
from .jsonic import dumps as jdumps
from .report_schema import DiagnosticEntry, RenderReport, StylesheetEntry
from .routing import view_document_path, view_from_hash
from .sources import FileSystemSource
from .template import format_tree, parse_declarations, parse_template, strip_declarations, strip_shielded_directives
from .template.declarations import literal_or_text
from .version import tool_version

DEBUG_ENV = "INKU_DEBUG"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="inku",
        description="Inku template engine (declarations, loops, conditions, includes)",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Общие аргументы всех подкоманд
    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--root",
            type=Path,
            default=None,
            help="корень проекта (по умолчанию текущий каталог)",
        )
        sp.add_argument(
            "--set",
            action="append",
            metavar="KEY=EXPR",
            dest="assignments",
            help="переменная контекста; EXPR вычисляется как литерал (можно указать несколько)",
        )
        sp.add_argument(
            "--verbose",
            action="store_true",
            help="подробный лог в stderr",
        )

    sp_render = sub.add_parser("render", help="Отрендерить страницу вида (текст)")
    sp_render.add_argument("view", help="имя вида, например home или about")
    add_common(sp_render)

    sp_file = sub.add_parser("render-file", help="Отрендерить произвольный документ (текст)")
    sp_file.add_argument("path", help="путь документа относительно корня")
    add_common(sp_file)

    sp_report = sub.add_parser("report", help="JSON-отчёт о рендере страницы")
    sp_report.add_argument("view", help="имя вида")
    add_common(sp_report)

    sp_tree = sub.add_parser("tree", help="Дерево блоков документа (отладка)")
    sp_tree.add_argument("path", help="путь документа относительно корня")
    add_common(sp_tree)

    sp_route = sub.add_parser("route", help="Вид и документ для hash-фрагмента (JSON)")
    sp_route.add_argument("hash", help="hash-фрагмент, например '#/about'")
    add_common(sp_route)

    return p


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose or os.environ.get(DEBUG_ENV) else logging.WARNING
    log = logging.getLogger("inku")
    log.setLevel(level)
    if not log.handlers:
        h = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        h.setFormatter(fmt)
        log.addHandler(h)


def _parse_assignments(items: Optional[List[str]]) -> Dict[str, Any]:
    """Парсит список 'KEY=EXPR' в словарь контекста."""
    result: Dict[str, Any] = {}
    if not items:
        return result

    for item in items:
        key, sep, expr = item.partition("=")
        key = key.strip()
        if not sep or not key.isidentifier():
            raise InkuUserError(f"Invalid --set format '{item}'. Expected 'KEY=EXPR'")
        result[key] = literal_or_text(expr.strip())

    return result


def _root(ns: argparse.Namespace) -> Path:
    return (ns.root or Path.cwd()).resolve()


def _make_app(ns: argparse.Namespace, presenter) -> InkuApp:
    root = _root(ns)
    cfg = load_config(root)
    source = FileSystemSource(root, encoding=cfg.encoding)
    return InkuApp(source, presenter=presenter, config=cfg)


def _report(outcome: RenderOutcome) -> RenderReport:
    return RenderReport(
        view=outcome.view,
        path=outcome.path,
        generation=outcome.generation,
        text=outcome.text,
        diagnostics=[
            DiagnosticEntry(kind=d.kind, message=d.message, path=d.path)
            for d in outcome.result.diagnostics
        ],
        inserted_stylesheets=[
            StylesheetEntry(href=s.href, document=s.document)
            for s in outcome.inserted_styles
        ],
        presented=outcome.presented,
    )


def _tree_text(ns: argparse.Namespace) -> str:
    root = _root(ns)
    cfg = load_config(root)
    text = FileSystemSource(root, encoding=cfg.encoding).fetch(ns.path)
    text = strip_shielded_directives(text)

    lines = [f"${name} = {value!r}" for name, value in parse_declarations(text).items()]
    tree = parse_template(strip_declarations(text), path=ns.path)
    lines.append(format_tree(tree))
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(bool(getattr(ns, "verbose", False)))

    try:
        context = _parse_assignments(getattr(ns, "assignments", None))

        if ns.cmd == "render":
            _make_app(ns, StreamPresenter(sys.stdout)).render(ns.view, context)
            return 0

        if ns.cmd == "render-file":
            _make_app(ns, StreamPresenter(sys.stdout)).render_path(ns.path, context)
            return 0

        if ns.cmd == "report":
            outcome = _make_app(ns, ListPresenter()).render(ns.view, context)
            sys.stdout.write(jdumps(_report(outcome).model_dump(mode="json")))
            return 0

        if ns.cmd == "tree":
            sys.stdout.write(_tree_text(ns))
            return 0

        if ns.cmd == "route":
            cfg = load_config(_root(ns))
            view = view_from_hash(ns.hash, cfg.default_route)
            sys.stdout.write(jdumps({"view": view, "path": view_document_path(view, cfg.pages)}))
            return 0

    except InkuUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
