"""Practice problem model."""

import uuid

from pydantic import BaseModel, Field


def new_problem_id() -> str:
    """Generate an opaque problem id, unique per queue instance."""
    return uuid.uuid4().hex


class Problem(BaseModel):
    """A single multiplication problem waiting in the session queue."""

    operand_a: int
    operand_b: int
    id: str = Field(default_factory=new_problem_id)
    attempts: int = Field(default=0, ge=0)

    @property
    def answer(self) -> int:
        return self.operand_a * self.operand_b

    def requeued(self) -> "Problem":
        """Copy of this problem for re-insertion after a wrong answer."""
        return self.model_copy(update={"id": new_problem_id(), "attempts": self.attempts + 1})
