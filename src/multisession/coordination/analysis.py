"""Work description analysis for automatic session selection.

Turns a free-text description of upcoming work (plus the files it touches)
into a :class:`WorkContext`: a technical domain, focus tags, recommended
directories and file patterns, and a confidence score that decides whether
a dedicated session is worth creating.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any

from multisession.coordination.allocator import suggest_focus
from multisession.session.names import normalize_path

GENERAL = "general"

# A domain wins when more than this share of its keywords appear
DOMAIN_MATCH_THRESHOLD = 0.3

DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "frontend": (
        "ui", "component", "react", "vue", "angular", "css", "html", "style", "frontend", "client",
    ),
    "backend": ("api", "server", "backend", "database", "auth", "endpoint", "route", "controller"),
    "testing": ("test", "testing", "spec", "unit test", "integration", "e2e", "cypress", "jest"),
    "database": ("database", "db", "migration", "schema", "sql", "query", "table"),
    "devops": ("deploy", "deployment", "docker", "ci/cd", "pipeline", "infrastructure"),
}

DOMAIN_DIRECTORIES: dict[str, tuple[str, ...]] = {
    "frontend": ("src/components", "src/pages", "src/styles", "public"),
    "backend": ("src/api", "src/routes", "src/controllers", "src/models"),
    "testing": ("tests", "test", "__tests__", "cypress"),
    "database": ("migrations", "database", "src/models"),
    "devops": (".github", "docker", "deploy"),
}

DOMAIN_PATTERNS: dict[str, tuple[str, ...]] = {
    "frontend": ("*.tsx", "*.jsx", "*.css", "*.scss", "*.html"),
    "backend": ("*.js", "*.ts", "*.json"),
    "testing": ("*.test.js", "*.spec.js", "*.cy.js"),
    "database": ("*.sql", "*.prisma", "*migration*"),
    "devops": ("*.yml", "*.yaml", "Dockerfile"),
}


@dataclass
class WorkContext:
    """What a piece of work looks like to the session manager."""

    description: str
    domain: str
    focus: list[str]
    directories: list[str] = field(default_factory=list)
    file_types: list[str] = field(default_factory=list)
    confidence: float = 0.0

    @property
    def suggested_name(self) -> str:
        if len(self.focus) == 1 and self.focus[0] != GENERAL:
            return f"{self.domain}-{self.focus[0]}"
        return self.domain

    @property
    def recommended_directories(self) -> list[str]:
        defaults = DOMAIN_DIRECTORIES.get(self.domain, ("src",))
        return list(dict.fromkeys([*defaults, *self.directories]))

    @property
    def recommended_patterns(self) -> list[str]:
        defaults = DOMAIN_PATTERNS.get(self.domain, ("*",))
        return list(dict.fromkeys([*defaults, *self.file_types]))

    @property
    def reasoning(self) -> str:
        if self.confidence > 0.8:
            return (
                f"High confidence {self.domain} work detected. "
                f"Focus areas: {', '.join(self.focus)}"
            )
        if self.confidence > 0.5:
            return f"Moderate confidence {self.domain} work detected. May need adjustment."
        return "Low confidence detection. Using general session with adaptive focus."

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "domain": self.domain,
            "focus": list(self.focus),
            "directories": list(self.directories),
            "file_types": list(self.file_types),
            "confidence": self.confidence,
            "suggested_name": self.suggested_name,
            "reasoning": self.reasoning,
        }


def detect_domain(text: str) -> str:
    """Technical domain with the best keyword hit rate, or ``"general"``."""
    lowered = text.lower()
    best, best_score = GENERAL, 0.0
    for domain, keywords in DOMAIN_KEYWORDS.items():
        score = sum(1 for keyword in keywords if keyword in lowered) / len(keywords)
        if score > best_score:
            best, best_score = domain, score
    return best if best_score > DOMAIN_MATCH_THRESHOLD else GENERAL


def file_directories(files: Iterable[str]) -> list[str]:
    """Distinct parent directories of ``files``; top-level files add none."""
    parents = (str(PurePosixPath(normalize_path(f)).parent) for f in files)
    return list(dict.fromkeys(p for p in parents if p != "."))


def file_types(files: Iterable[str]) -> list[str]:
    """Distinct ``*.ext`` patterns for ``files`` that have an extension."""
    suffixes = (PurePosixPath(normalize_path(f)).suffix for f in files)
    return list(dict.fromkeys(f"*{s}" for s in suffixes if s))


def analyze_work(description: str, files: Sequence[str] = ()) -> WorkContext:
    """Analyze a work description and the files it involves.

    Confidence adds 0.4 for a recognized domain, 0.3 for focus tags (always
    present, ``general`` being the fallback), 0.2 when the files name
    directories and 0.1 when they carry extensions.
    """
    context = WorkContext(
        description=description,
        domain=detect_domain(description),
        focus=suggest_focus(description),
        directories=file_directories(files),
        file_types=file_types(files),
    )
    confidence = 0.0
    if context.domain != GENERAL:
        confidence += 0.4
    if context.focus:
        confidence += 0.3
    if context.directories:
        confidence += 0.2
    if context.file_types:
        confidence += 0.1
    context.confidence = round(min(confidence, 1.0), 2)
    return context
