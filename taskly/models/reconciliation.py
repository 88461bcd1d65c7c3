"""Summary returned by every reconciliation job."""

from typing import List

from pydantic import BaseModel, Field


class ReconciliationResult(BaseModel):
    """Counts of what a job did. Not persisted."""

    created: int = 0
    updated: int = 0
    linked: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def summary(self) -> str:
        return (
            f"Created: {self.created}, Updated: {self.updated}, "
            f"Linked: {self.linked}, Skipped: {self.skipped}, Errors: {len(self.errors)}."
        )
