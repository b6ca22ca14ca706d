"""Declarative category rules used to reclassify enriched records.

Rules are evaluated in declaration order; on equal scores the earlier rule
wins.
"""

import re
from dataclasses import dataclass, field
from typing import Final


@dataclass(frozen=True)
class CategoryRule:
    """Weighted matcher for one category.

    Attributes:
        name: Category assigned when the rule wins.
        keywords: Terms looked for in the name, description and keywords.
        patterns: Regexes tested against the name and description.
        languages: Languages that hint at this category.
        weight: Base weight of every match.
        priority: Multiplies the total by ``1 + priority * 0.1``.
    """

    name: str
    keywords: tuple[str, ...] = ()
    patterns: tuple[re.Pattern[str], ...] = field(default=())
    languages: tuple[str, ...] = ()
    weight: float = 1.0
    priority: int = 1


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p) for p in patterns)


DEFAULT_CATEGORY_RULES: Final[tuple[CategoryRule, ...]] = (
    CategoryRule(
        name="frontend",
        keywords=(
            "react", "vue", "angular", "svelte", "ui", "component",
            "frontend", "client", "browser", "dom",
        ),
        patterns=_compile(r"^react-", r"^vue-", r"^@angular", r"-ui$", r"-component$"),
        languages=("javascript", "typescript", "html", "css"),
    ),
    CategoryRule(
        name="backend",
        keywords=(
            "api", "server", "backend", "express", "fastify", "koa",
            "django", "flask", "gin",
        ),
        patterns=_compile(r"^express-", r"-server$", r"-api$"),
        languages=("javascript", "python", "go", "java", "rust", "php"),
    ),
    CategoryRule(
        name="database",
        keywords=(
            "database", "db", "sql", "nosql", "orm", "mongodb",
            "postgres", "mysql", "redis",
        ),
        patterns=_compile(r"-db$", r"-orm$", r"^pg-", r"^mongo-"),
        languages=("sql", "javascript", "python"),
    ),
    CategoryRule(
        name="devops",
        keywords=(
            "docker", "kubernetes", "deploy", "ci", "cd", "jenkins",
            "github-actions", "terraform",
        ),
        patterns=_compile(r"^docker-", r"-cli$", r"^k8s-"),
        languages=("yaml", "bash", "shell"),
    ),
    CategoryRule(
        name="testing",
        keywords=(
            "test", "testing", "jest", "mocha", "cypress", "playwright",
            "selenium", "pytest",
        ),
        patterns=_compile(r"^jest-", r"-test$", r"^test-"),
        languages=("javascript", "python", "java"),
    ),
    CategoryRule(
        name="monitoring",
        keywords=("monitor", "logging", "metrics", "observability", "analytics", "telemetry"),
        patterns=_compile(r"-monitor$", r"^log-", r"-metrics$"),
        languages=("javascript", "python", "go"),
        weight=0.9,
    ),
    CategoryRule(
        name="security",
        keywords=("security", "auth", "authentication", "authorization", "crypto", "encryption"),
        patterns=_compile(r"^auth-", r"-security$", r"^crypto-"),
        languages=("javascript", "python", "go", "rust"),
        weight=0.9,
    ),
    CategoryRule(
        name="machine-learning",
        keywords=("ml", "ai", "machine-learning", "neural", "tensorflow", "pytorch", "scikit"),
        patterns=_compile(r"^ml-", r"-ai$", r"^tf-"),
        languages=("python", "r", "julia"),
        weight=0.8,
    ),
    CategoryRule(
        name="data-science",
        keywords=("data", "analytics", "visualization", "pandas", "numpy", "chart", "graph"),
        patterns=_compile(r"^data-", r"-chart$", r"-viz$"),
        languages=("python", "r", "javascript"),
        weight=0.8,
    ),
    CategoryRule(
        name="library",
        keywords=("util", "utility", "helper", "tool", "common", "shared"),
        patterns=_compile(r"^util-", r"-utils$", r"-helpers$"),
        weight=0.5,
        priority=0,
    ),
)
