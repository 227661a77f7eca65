from typing import Optional

from pydantic import BaseModel

MISSING_SEQUENCE = "missing query param 'sequence'"
GENERIC_ERROR = "Something went wrong!"


class VisitCount(BaseModel):
    visit_count: str
    error: Optional[str] = None

    @classmethod
    def of(cls, count: int, error: Optional[str] = None) -> "VisitCount":
        return cls(visit_count=str(count), error=error)

    def body(self) -> dict:
        return self.model_dump(exclude_none=True)
