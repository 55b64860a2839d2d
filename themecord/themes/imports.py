"""Inline CSS `@import` statements so a theme can be injected as one stylesheet.

Resolution works in passes. Every pass collects the `@import` lines present in
the text, fetches all of their targets concurrently and substitutes the ones
that arrived. A pass with failures is retried on the partially substituted
text until the retry budget runs out; a pass that succeeded but pulled in new
`@import` lines is followed by another pass on the same budget. A target that
is already part of the resolution chain is a circular reference and fails the
whole resolution at once, whatever budget is left.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol
from urllib.parse import urljoin, urlsplit

from themecord.errors import CircularImportError, OperationCancelledError
from themecord.themes.fetcher import is_local_locator, locator_to_path

logger = logging.getLogger(__name__)

DEFAULT_MAX_TRIES = 5

ANY_IMPORT_RE = re.compile(r"^@import .+?$", re.MULTILINE)
STATEMENT_RE = re.compile(r"""^@import (?:(?:url\()?["']?([^"';)]*)["']?)\)?;?""", re.MULTILINE)


class Fetcher(Protocol):
    async def fetch(self, locator: str, cancel: asyncio.Event | None = None) -> bytes: ...


class ResolverState(Enum):
    SCANNING = auto()
    RESOLVING_PASS = auto()
    RETRYING = auto()
    DONE = auto()
    FAILED = auto()


@dataclass(frozen=True, slots=True)
class ImportStatement:
    """One `@import` statement; ``text`` is the substitution key."""

    text: str
    target: str
    locator: str


@dataclass(slots=True)
class ResolutionRun:
    """Mutable state of a single top-level resolution."""

    css: str
    chain: list[str]
    tries_left: int
    visited: set[str] = field(default_factory=set)
    state: ResolverState = ResolverState.SCANNING
    passes: int = 0
    error: BaseException | None = None

    @property
    def origin(self) -> str:
        return self.chain[0]

    def commit(self, statement: ImportStatement, content: str) -> None:
        self.css = self.css.replace(statement.text, content, 1)
        # Identical statements of one pass share a single chain entry.
        if statement.locator not in self.visited:
            self.chain.append(statement.locator)
            self.visited.add(statement.locator)


def has_imports(css: str) -> bool:
    return ANY_IMPORT_RE.search(css) is not None


def resolve_locator(base: str, target: str) -> str:
    """Resolve ``target`` against the locator of the stylesheet declaring it.

    Local bases resolve relative to their directory; remote bases use URL
    joining. Absolute URLs and paths are returned as they are.
    """
    scheme = urlsplit(target).scheme
    if scheme == "file":
        return str(locator_to_path(target))
    if len(scheme) > 1:
        return target
    if is_local_locator(base):
        base_dir = os.path.dirname(str(locator_to_path(base)))
        return os.path.normpath(os.path.join(base_dir, target))
    return urljoin(base, target)


def find_statements(css: str, base: str) -> list[ImportStatement]:
    statements: list[ImportStatement] = []
    for line in ANY_IMPORT_RE.findall(css):
        match = STATEMENT_RE.match(line)
        if match is None:
            continue
        target = match.group(1)
        statements.append(
            ImportStatement(text=match.group(0), target=target, locator=resolve_locator(base, target))
        )
    return statements


def rebase_imports(css: str, locator: str) -> str:
    """Rewrite the `@import` targets of ``css`` to absolute locators."""

    def _absolute(match: re.Match[str]) -> str:
        return f'@import url("{resolve_locator(locator, match.group(1))}");'

    return STATEMENT_RE.sub(_absolute, css)


class ImportResolver:
    """Expand `@import` statements, retrying failed passes a bounded number of times."""

    def __init__(self, fetcher: Fetcher, *, max_tries: int = DEFAULT_MAX_TRIES, retry_delay: float = 0.0) -> None:
        self._fetcher = fetcher
        self._max_tries = max_tries
        self._retry_delay = retry_delay

    async def resolve(
        self,
        css: str,
        chain: list[str],
        max_tries: int | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> str:
        """Return ``css`` with every `@import` replaced by the imported text.

        ``chain`` lists the locators already visited; its last entry is the
        locator of ``css`` itself. The list passed in is not modified.
        """
        if not chain:
            raise ValueError("resolution chain must contain the locator of the stylesheet")
        tries = self._max_tries if max_tries is None else max_tries
        run = ResolutionRun(css=css, chain=list(chain), tries_left=tries, visited=set(chain))
        base = chain[-1]

        while True:
            if run.state is ResolverState.SCANNING:
                run.state = ResolverState.RESOLVING_PASS if has_imports(run.css) else ResolverState.DONE

            elif run.state is ResolverState.RESOLVING_PASS:
                run.passes += 1
                failures = await self._resolve_pass(run, base, cancel)
                if not failures:
                    run.state = ResolverState.SCANNING
                    continue
                fatal = next(
                    (exc for exc in failures if isinstance(exc, (CircularImportError, OperationCancelledError))),
                    None,
                )
                if fatal is not None:
                    run.error = fatal
                    run.state = ResolverState.FAILED
                elif run.tries_left <= 0:
                    run.error = failures[0]
                    run.state = ResolverState.FAILED
                else:
                    run.state = ResolverState.RETRYING

            elif run.state is ResolverState.RETRYING:
                run.tries_left -= 1
                logger.warning(
                    "Couldn't resolve CSS theme imports of %s, retrying (%d tries left)...",
                    run.origin,
                    run.tries_left,
                )
                if self._retry_delay > 0:
                    await asyncio.sleep(self._retry_delay)
                run.state = ResolverState.SCANNING

            elif run.state is ResolverState.DONE:
                return run.css

            else:
                assert run.error is not None
                raise run.error

    async def _resolve_pass(
        self,
        run: ResolutionRun,
        base: str,
        cancel: asyncio.Event | None,
    ) -> list[BaseException]:
        statements = find_statements(run.css, base)
        results = await asyncio.gather(
            *(self._resolve_one(run, statement, cancel) for statement in statements),
            return_exceptions=True,
        )

        failures: list[BaseException] = []
        for statement, result in zip(statements, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.debug("import %s failed: %s", statement.locator, result)
                failures.append(result)
                continue
            run.commit(statement, result)
        return failures

    async def _resolve_one(
        self,
        run: ResolutionRun,
        statement: ImportStatement,
        cancel: asyncio.Event | None,
    ) -> str:
        if statement.locator in run.visited:
            raise CircularImportError(statement.locator)
        data = await self._fetcher.fetch(statement.locator, cancel)
        return rebase_imports(data.decode("utf-8", errors="replace"), statement.locator)


async def parse_imports(
    css: str,
    chain: list[str],
    max_tries: int = DEFAULT_MAX_TRIES,
    *,
    fetcher: Fetcher,
    retry_delay: float = 0.0,
    cancel: asyncio.Event | None = None,
) -> str:
    """Convenience wrapper around :class:`ImportResolver`."""
    resolver = ImportResolver(fetcher, max_tries=max_tries, retry_delay=retry_delay)
    return await resolver.resolve(css, chain, cancel=cancel)
