"""Tests for CSS `@import` resolution."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx
import pytest

from themecord.errors import CircularImportError, FetchError
from themecord.themes.fetcher import ContentFetcher
from themecord.themes.imports import (
    ImportResolver,
    find_statements,
    has_imports,
    parse_imports,
    rebase_imports,
    resolve_locator,
)
from tests.fakes import FakeFetcher


def _flaky(failures: int, content: str):
    state = {"calls": 0}

    def produce():
        state["calls"] += 1
        if state["calls"] <= failures:
            return FetchError("flaky", "connection reset")
        return content

    return produce


def _resolve(css: str, chain: list[str], fetcher, max_tries: int = 5) -> str:
    return asyncio.run(parse_imports(css, chain, max_tries, fetcher=fetcher))


@pytest.mark.parametrize(
    "statement",
    [
        '@import "x.css";',
        "@import 'x.css';",
        '@import url("x.css");',
        "@import url('x.css');",
        "@import url(x.css);",
        "@import url(x.css)",
        '@import "x.css"',
        "@import x.css;",
    ],
)
def test_accepted_import_forms(statement: str) -> None:
    statements = find_statements(f"{statement}\nbody {{}}", "/themes/main.css")
    assert len(statements) == 1
    assert statements[0].target == "x.css"
    assert statements[0].locator == "/themes/x.css"
    assert statements[0].text == statement


def test_statement_key_excludes_trailing_rules() -> None:
    statements = find_statements('@import "b.theme.css"; body{color:red;}', "/t/a.css")
    assert statements[0].text == '@import "b.theme.css";'


def test_import_must_start_the_line() -> None:
    css = '  @import "x.css";\n/* @import "y.css"; */'
    assert has_imports(css) is False


def test_resolve_locator_local_and_remote() -> None:
    assert resolve_locator("/themes/main.css", "parts/a.css") == "/themes/parts/a.css"
    assert resolve_locator("/themes/main.css", "../shared/a.css") == "/shared/a.css"
    assert resolve_locator("/themes/main.css", "/abs/a.css") == "/abs/a.css"
    assert resolve_locator("/themes/main.css", "file:///abs/a%20b.css") == "/abs/a b.css"
    assert resolve_locator("/themes/main.css", "https://cdn.example/a.css") == "https://cdn.example/a.css"
    assert resolve_locator("https://cdn.example/t/main.css", "parts/a.css") == "https://cdn.example/t/parts/a.css"


def test_rebase_imports_makes_targets_absolute() -> None:
    css = '@import "c.css"\n.b { color: red; }'
    assert rebase_imports(css, "/themes/sub/b.css") == '@import url("/themes/sub/c.css");\n.b { color: red; }'


def test_text_without_imports_is_returned_unchanged() -> None:
    fetcher = FakeFetcher()
    css = "body { color: red; }\n"
    assert _resolve(css, ["/themes/a.css"], fetcher) == css
    assert fetcher.calls == []


def test_single_import_is_substituted(tmp_path: Path) -> None:
    root = str(tmp_path / "a.css")
    fetcher = FakeFetcher({str(tmp_path / "b.theme.css"): "a{background:blue;}"})

    result = _resolve('@import "b.theme.css"; body{color:red;}', [root], fetcher)

    assert result == "a{background:blue;} body{color:red;}"


def test_nested_imports_resolve_relative_to_declaring_file(tmp_path: Path) -> None:
    root = str(tmp_path / "a.css")
    sub_b = str(tmp_path / "sub" / "b.css")
    sub_c = str(tmp_path / "sub" / "c.css")
    fetcher = FakeFetcher({
        sub_b: '@import "c.css";\n.b{}',
        sub_c: ".c{}",
    })

    result = _resolve('@import "sub/b.css";\nbody{}', [root], fetcher)

    assert result == ".c{}\n.b{}\nbody{}"
    assert fetcher.calls == [sub_b, sub_c]


def test_duplicate_statements_are_each_substituted(tmp_path: Path) -> None:
    root = str(tmp_path / "a.css")
    fetcher = FakeFetcher({str(tmp_path / "x.css"): ".x{}"})

    result = _resolve('@import "x.css";\n.a{}\n@import "x.css";\n', [root], fetcher)

    assert result == ".x{}\n.a{}\n.x{}\n"


def test_self_import_is_circular(tmp_path: Path) -> None:
    root = str(tmp_path / "a.css")
    fetcher = FakeFetcher()

    with pytest.raises(CircularImportError) as exc_info:
        _resolve('@import "a.css";', [root], fetcher)

    assert exc_info.value.locator == root
    assert fetcher.calls == []


@pytest.mark.parametrize("max_tries", [0, 1, 5, 50])
def test_transitive_cycle_fails_regardless_of_budget(tmp_path: Path, max_tries: int) -> None:
    root = str(tmp_path / "a.css")
    b = str(tmp_path / "b.css")
    fetcher = FakeFetcher({b: '@import "a.css";\n.b{}'})

    with pytest.raises(CircularImportError) as exc_info:
        _resolve('@import "b.css";', [root], fetcher, max_tries=max_tries)

    assert root in str(exc_info.value)
    assert fetcher.calls == [b]


@pytest.mark.parametrize("failures,max_tries", [(0, 0), (1, 1), (3, 3), (3, 5)])
def test_flaky_import_resolves_within_budget(tmp_path: Path, failures: int, max_tries: int) -> None:
    remote = "https://cdn.example/theme.css"
    fetcher = FakeFetcher({remote: _flaky(failures, ".remote{}")})

    result = _resolve(f'@import url("{remote}");\nbody{{}}', [str(tmp_path / "a.css")], fetcher, max_tries)

    assert result == ".remote{}\nbody{}"
    assert len(fetcher.calls) == failures + 1


@pytest.mark.parametrize("failures,max_tries", [(1, 0), (3, 2), (6, 5)])
def test_flaky_import_fails_when_budget_too_small(tmp_path: Path, failures: int, max_tries: int) -> None:
    remote = "https://cdn.example/theme.css"
    fetcher = FakeFetcher({remote: _flaky(failures, ".remote{}")})

    with pytest.raises(FetchError):
        _resolve(f'@import url("{remote}");', [str(tmp_path / "a.css")], fetcher, max_tries)

    assert len(fetcher.calls) == max_tries + 1


def test_partial_progress_survives_retry(tmp_path: Path) -> None:
    root = str(tmp_path / "a.css")
    a = str(tmp_path / "one.css")
    b = str(tmp_path / "two.css")
    fetcher = FakeFetcher({a: _flaky(1, ".one{}"), b: ".two{}"})

    result = _resolve('@import "one.css";\n@import "two.css";\n', [root], fetcher)

    assert result == ".one{}\n.two{}\n"
    assert fetcher.calls.count(b) == 1
    assert fetcher.calls.count(a) == 2


def test_first_failure_is_reported_when_budget_exhausted(tmp_path: Path) -> None:
    root = str(tmp_path / "a.css")
    fetcher = FakeFetcher({
        str(tmp_path / "one.css"): FetchError("one"),
        str(tmp_path / "two.css"): FetchError("two"),
    })

    with pytest.raises(FetchError) as exc_info:
        _resolve('@import "one.css";\n@import "two.css";\n', [root], fetcher, max_tries=0)

    assert exc_info.value.locator == "one"


def test_new_imports_do_not_consume_budget(tmp_path: Path) -> None:
    root = str(tmp_path / "a.css")
    fetcher = FakeFetcher({
        str(tmp_path / "b.css"): '@import "c.css";',
        str(tmp_path / "c.css"): '@import "d.css";',
        str(tmp_path / "d.css"): ".d{}",
    })

    assert _resolve('@import "b.css";', [root], fetcher, max_tries=0) == ".d{}"


def test_retry_is_logged(tmp_path: Path, caplog) -> None:
    remote = "https://cdn.example/theme.css"
    fetcher = FakeFetcher({remote: _flaky(1, ".remote{}")})

    with caplog.at_level(logging.WARNING, logger="themecord.themes.imports"):
        _resolve(f'@import "{remote}";', [str(tmp_path / "a.css")], fetcher)

    assert any("retrying" in record.getMessage() for record in caplog.records)


def test_caller_chain_is_not_modified(tmp_path: Path) -> None:
    chain = [str(tmp_path / "a.css")]
    fetcher = FakeFetcher({str(tmp_path / "b.css"): ".b{}"})

    _resolve('@import "b.css";', chain, fetcher)

    assert chain == [str(tmp_path / "a.css")]


def test_empty_chain_is_rejected() -> None:
    resolver = ImportResolver(FakeFetcher())
    with pytest.raises(ValueError):
        asyncio.run(resolver.resolve("body{}", []))


def test_resolver_uses_configured_budget(tmp_path: Path) -> None:
    remote = "https://cdn.example/theme.css"
    fetcher = FakeFetcher({remote: _flaky(2, ".r{}")})
    resolver = ImportResolver(fetcher, max_tries=1)

    with pytest.raises(FetchError):
        asyncio.run(resolver.resolve(f'@import "{remote}";', [str(tmp_path / "a.css")]))


def test_mixed_local_and_remote_sources(tmp_path: Path) -> None:
    (tmp_path / "local.css").write_text('@import url("https://cdn.example/base/remote.css");\n.local{}', encoding="utf-8")

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/base/remote.css":
            return httpx.Response(200, text='@import "more.css";\n.remote{}')
        if request.url.path == "/base/more.css":
            return httpx.Response(200, text=".more{}")
        return httpx.Response(404)

    async def scenario() -> str:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            fetcher = ContentFetcher(client)
            return await parse_imports('@import "local.css";\nbody{}', [str(tmp_path / "main.css")], fetcher=fetcher)

    assert asyncio.run(scenario()) == ".more{}\n.remote{}\n.local{}\nbody{}"
