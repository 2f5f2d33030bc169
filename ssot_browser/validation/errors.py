from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ValidationIssue:
    """One config/dataset mismatch, e.g. a facet pointing at a missing column."""
    code: str
    message: str
    column: Optional[str] = None


class ValidationError(Exception):
    def __init__(self, resource: str, issues: list[ValidationIssue]):
        self.resource = resource
        self.issues = issues
        super().__init__(
            f"{resource}: " + "; ".join(f"{i.code}: {i.message}" for i in issues)
        )

    @property
    def missing_columns(self) -> list[str]:
        return sorted({i.column for i in self.issues if i.column})
