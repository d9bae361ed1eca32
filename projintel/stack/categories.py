"""Database, testing and styling detectors (config, dependency, CDN cascade)."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from ..models import DetectedValue
from . import manifests
from .base import (
    DetectionContext,
    Detector,
    first_match,
    match_cdn,
    match_dependency,
    match_module_prefix,
)

CONFIG_CONFIDENCE = 0.95
NODE_CONFIDENCE = 0.90
DEPENDENCY_CONFIDENCE = 0.85
BUILTIN_CONFIDENCE = 0.90

ConfigRule = Tuple[Sequence[str], str, float]


def _config_files(context: DetectionContext, rules: Sequence[ConfigRule]) -> Optional[DetectedValue]:
    for names, value, confidence in rules:
        for name in names:
            if context.tree.is_file(name):
                return DetectedValue(value=value, confidence=confidence, source=f"{name} found")
    return None


# Database

_PRISMA_PROVIDER = re.compile(r"""provider\s*=\s*["']([\w-]+)["']""")
PRISMA_PROVIDERS = {
    "postgresql": "PostgreSQL",
    "postgres": "PostgreSQL",
    "mysql": "MySQL",
    "sqlite": "SQLite",
    "mongodb": "MongoDB",
    "sqlserver": "SQL Server",
    "cockroachdb": "CockroachDB",
}

COMPOSE_FILES = ("docker-compose.yml", "docker-compose.yaml")
COMPOSE_SERVICES: Sequence[Tuple[str, str]] = (
    ("postgres", "PostgreSQL"),
    ("mongo", "MongoDB"),
    ("mysql", "MySQL"),
    ("mariadb", "MySQL"),
    ("redis", "Redis"),
)

NODE_DATABASES: Sequence[Tuple[str, str]] = (
    ("pg", "PostgreSQL"),
    ("postgres", "PostgreSQL"),
    ("mysql2", "MySQL"),
    ("mongodb", "MongoDB"),
    ("mongoose", "MongoDB"),
    ("better-sqlite3", "SQLite"),
    ("sqlite3", "SQLite"),
    ("redis", "Redis"),
    ("ioredis", "Redis"),
    ("@supabase/supabase-js", "Supabase"),
    ("firebase", "Firebase"),
    ("firebase-admin", "Firebase"),
)

CARGO_DATABASES: Sequence[Tuple[str, str]] = (
    ("rusqlite", "SQLite"),
    ("tokio-postgres", "PostgreSQL"),
    ("postgres", "PostgreSQL"),
    ("sqlx", "PostgreSQL"),
    ("diesel", "PostgreSQL"),
    ("mysql", "MySQL"),
    ("mongodb", "MongoDB"),
    ("redis", "Redis"),
)

PYTHON_DATABASES: Sequence[Tuple[str, str]] = (
    ("psycopg2", "PostgreSQL"),
    ("psycopg2-binary", "PostgreSQL"),
    ("psycopg", "PostgreSQL"),
    ("asyncpg", "PostgreSQL"),
    ("pymysql", "MySQL"),
    ("mysqlclient", "MySQL"),
    ("pymongo", "MongoDB"),
    ("motor", "MongoDB"),
    ("redis", "Redis"),
    ("supabase", "Supabase"),
    ("firebase-admin", "Firebase"),
)

GO_DATABASES: Sequence[Tuple[str, str]] = (
    ("github.com/lib/pq", "PostgreSQL"),
    ("github.com/jackc/pgx", "PostgreSQL"),
    ("github.com/go-sql-driver/mysql", "MySQL"),
    ("github.com/mattn/go-sqlite3", "SQLite"),
    ("go.mongodb.org/mongo-driver", "MongoDB"),
    ("github.com/redis/go-redis", "Redis"),
    ("github.com/go-redis/redis", "Redis"),
)

CDN_DATABASES: Sequence[Tuple[str, str]] = (
    ("cdn.jsdelivr.net/npm/@supabase/supabase-js", "Supabase"),
    ("unpkg.com/@supabase/supabase-js", "Supabase"),
    ("gstatic.com/firebasejs", "Firebase"),
)


class DatabaseDetector(Detector):
    category = "database"

    def detect(self, context: DetectionContext) -> Optional[DetectedValue]:
        return first_match(
            lambda: self._prisma(context),
            lambda: self._compose(context),
            lambda: match_dependency(
                list(context.node_dependencies()),
                NODE_DATABASES,
                confidence=NODE_CONFIDENCE,
                manifest="package.json",
            ),
            lambda: match_dependency(
                context.cargo_dependencies(),
                CARGO_DATABASES,
                confidence=DEPENDENCY_CONFIDENCE,
                manifest="Cargo.toml",
            ),
            lambda: match_dependency(
                context.python_dependencies(),
                PYTHON_DATABASES,
                confidence=DEPENDENCY_CONFIDENCE,
                manifest="Python dependencies",
            ),
            lambda: match_module_prefix(
                context.go_modules(),
                GO_DATABASES,
                confidence=DEPENDENCY_CONFIDENCE,
                manifest="go.mod",
            ),
            lambda: match_cdn(context, CDN_DATABASES, "CDN script tag in HTML"),
        )

    @staticmethod
    def _prisma(context: DetectionContext) -> Optional[DetectedValue]:
        text = context.tree.read_optional("prisma/schema.prisma")
        if text is None:
            return None
        for match in _PRISMA_PROVIDER.finditer(text):
            value = PRISMA_PROVIDERS.get(match.group(1).lower())
            if value is not None:
                return DetectedValue(
                    value=value,
                    confidence=CONFIG_CONFIDENCE,
                    source=f"{match.group(1)} provider in prisma/schema.prisma",
                )
        return None

    @staticmethod
    def _compose(context: DetectionContext) -> Optional[DetectedValue]:
        for name in COMPOSE_FILES:
            text = context.tree.read_optional(name)
            if text is None:
                continue
            lowered = text.lower()
            for keyword, value in COMPOSE_SERVICES:
                if keyword in lowered:
                    return DetectedValue(value=value, confidence=0.80, source=f"{keyword} in {name}")
        return None


# Testing

TEST_CONFIG_FILES: Sequence[ConfigRule] = (
    (("vitest.config.ts", "vitest.config.js", "vitest.config.mts", "vitest.config.mjs"), "Vitest", CONFIG_CONFIDENCE),
    (("jest.config.js", "jest.config.ts", "jest.config.cjs", "jest.config.mjs"), "Jest", CONFIG_CONFIDENCE),
    (("pytest.ini", "conftest.py"), "pytest", 0.90),
    (("playwright.config.ts", "playwright.config.js"), "Playwright", CONFIG_CONFIDENCE),
    (("cypress.config.ts", "cypress.config.js", "cypress.json"), "Cypress", CONFIG_CONFIDENCE),
)

NODE_TESTING: Sequence[Tuple[str, str]] = (
    ("vitest", "Vitest"),
    ("jest", "Jest"),
    ("@testing-library/react", "Testing Library"),
    ("mocha", "Mocha"),
    ("cypress", "Cypress"),
    ("playwright", "Playwright"),
    ("@playwright/test", "Playwright"),
)

PYTHON_TESTING: Sequence[Tuple[str, str]] = (("pytest", "pytest"), ("nose2", "nose2"))

JAVA_TESTING: Sequence[Tuple[str, str]] = (
    ("org.junit.jupiter:junit-jupiter", "JUnit"),
    ("org.junit.jupiter:junit-jupiter-api", "JUnit"),
    ("junit:junit", "JUnit"),
    ("org.springframework.boot:spring-boot-starter-test", "JUnit"),
)

CDN_TESTING: Sequence[Tuple[str, str]] = (
    ("cdn.jsdelivr.net/npm/mocha", "Mocha"),
    ("unpkg.com/mocha", "Mocha"),
    ("cdnjs.cloudflare.com/ajax/libs/jasmine", "Jasmine"),
    ("code.jquery.com/qunit", "QUnit"),
)

BUILTIN_TESTING = {"Rust": "cargo test", "Go": "go test"}


class TestingDetector(Detector):
    __test__ = False

    category = "testing"

    def detect(self, context: DetectionContext) -> Optional[DetectedValue]:
        return first_match(
            lambda: _config_files(context, TEST_CONFIG_FILES),
            lambda: self._pyproject(context),
            lambda: self._dependencies(context),
            lambda: match_cdn(context, CDN_TESTING, "CDN script tag in HTML"),
            lambda: self._builtin(context),
        )

    @staticmethod
    def _pyproject(context: DetectionContext) -> Optional[DetectedValue]:
        if manifests.has_pytest_config(context.tree):
            return DetectedValue("pytest", 0.90, "[tool.pytest] in pyproject.toml")
        return None

    @staticmethod
    def _dependencies(context: DetectionContext) -> Optional[DetectedValue]:
        language = context.language_name
        steps = [
            lambda: match_dependency(
                list(context.node_dependencies()),
                NODE_TESTING,
                confidence=NODE_CONFIDENCE,
                manifest="package.json",
            ),
            lambda: match_dependency(
                context.python_dependencies(),
                PYTHON_TESTING,
                confidence=DEPENDENCY_CONFIDENCE,
                manifest="Python dependencies",
            ),
            lambda: match_dependency(
                context.java_dependencies(),
                JAVA_TESTING,
                confidence=DEPENDENCY_CONFIDENCE,
                manifest="build manifest",
            ),
        ]
        if language == "Rust":
            steps.append(
                lambda: match_dependency(
                    context.cargo_dependencies(include_dev=True),
                    (("insta", "insta (snapshot)"),),
                    confidence=DEPENDENCY_CONFIDENCE,
                    manifest="Cargo.toml",
                )
            )
        return first_match(*steps)

    @staticmethod
    def _builtin(context: DetectionContext) -> Optional[DetectedValue]:
        runner = BUILTIN_TESTING.get(context.language_name)
        if runner is None:
            return None
        return DetectedValue(
            value=runner,
            confidence=BUILTIN_CONFIDENCE,
            source=f"Built-in {context.language_name} test framework",
        )


# Styling

TAILWIND_CONFIGS: Sequence[ConfigRule] = (
    (("tailwind.config.js", "tailwind.config.ts", "tailwind.config.mjs"), "Tailwind CSS", CONFIG_CONFIDENCE),
)

NODE_STYLING: Sequence[Tuple[str, str]] = (
    ("tailwindcss", "Tailwind CSS"),
    ("@chakra-ui/react", "Chakra UI"),
    ("@mui/material", "Material UI"),
    ("styled-components", "Styled Components"),
    ("@emotion/react", "Emotion"),
    ("sass", "Sass/SCSS"),
    ("less", "Less"),
    ("bootstrap", "Bootstrap"),
)

CDN_STYLING: Sequence[Tuple[str, str]] = (
    ("cdn.tailwindcss.com", "Tailwind CSS"),
    ("cdn.jsdelivr.net/npm/tailwindcss", "Tailwind CSS"),
    ("cdn.jsdelivr.net/npm/bootstrap", "Bootstrap"),
    ("cdnjs.cloudflare.com/ajax/libs/bootstrap", "Bootstrap"),
    ("cdn.jsdelivr.net/npm/bulma", "Bulma"),
    ("cdnjs.cloudflare.com/ajax/libs/bulma", "Bulma"),
    ("fonts.googleapis.com/css", "Google Fonts"),
)


class StylingDetector(Detector):
    category = "styling"

    def detect(self, context: DetectionContext) -> Optional[DetectedValue]:
        return first_match(
            lambda: _config_files(context, TAILWIND_CONFIGS),
            lambda: match_dependency(
                list(context.node_dependencies()),
                NODE_STYLING,
                confidence=NODE_CONFIDENCE,
                manifest="package.json",
            ),
            lambda: match_cdn(context, CDN_STYLING, "CDN link in HTML"),
        )


CATEGORY_DETECTORS: List[Detector] = [DatabaseDetector(), TestingDetector(), StylingDetector()]

__all__ = [
    "CATEGORY_DETECTORS",
    "DatabaseDetector",
    "StylingDetector",
    "TestingDetector",
]
