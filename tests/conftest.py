import json
import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest

from inku.sources import MemorySource
from inku.template import TemplateEngine

from tests.infrastructure.file_utils import write, write_tree

REPO_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def tmpproj(tmp_path: Path):
    """Минимальный проект: inku.yaml, две страницы и фрагменты."""
    root = tmp_path
    write_tree(root, {
        "inku.yaml": """\
            default_route: home
            globals:
              site: Inku
        """,
        "pages/home/index.html": """\
            {{ $title = "Home" }}
            <link rel="stylesheet" href="/css/home.css">
            <h1>{{?title}} | {{?site}}</h1>
            {{include("components/nav.html", active="home")}}
        """,
        "pages/about/index.html": """\
            <h1>About {{?site}}</h1>
            {{include("components/missing.html")}}
        """,
        "components/nav.html": """\
            <link rel="stylesheet" href="/css/nav.css">
            <nav class="{{!active}}">{{for(item in ["home", "about"])}}<a>{{?item}}</a>{{endfor}}</nav>
        """,
        "broken.html": "{{for(x in [1])}}unclosed",
    })
    return root


@pytest.fixture
def source() -> MemorySource:
    return MemorySource()


@pytest.fixture
def engine(source: MemorySource) -> TemplateEngine:
    return TemplateEngine(source)


@pytest.fixture(autouse=True)
def _reset_inku_logger():
    # CLI вешает обработчик на логгер "inku"; между тестами он не нужен
    yield
    log = logging.getLogger("inku")
    for handler in list(log.handlers):
        log.removeHandler(handler)
    log.setLevel(logging.NOTSET)


def run_cli(root: Path, *args: str) -> subprocess.CompletedProcess:
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    env.pop("INKU_DEBUG", None)
    return subprocess.run(
        [sys.executable, "-m", "inku.cli", *args],
        cwd=root, env=env, capture_output=True, text=True, encoding="utf-8"
    )


def jload(s: str):
    return json.loads(s)


__all__ = ["run_cli", "jload", "write"]
