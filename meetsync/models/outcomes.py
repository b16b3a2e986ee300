from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import OutcomeStatus


class Outcome(BaseModel):
    """Result of processing one unit of work (a page or a row): ok or skipped."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: OutcomeStatus
    value: Any = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, value: Any) -> "Outcome":
        return cls(status=OutcomeStatus.OK, value=value)

    @classmethod
    def skipped(cls, reason: str) -> "Outcome":
        return cls(status=OutcomeStatus.SKIPPED, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.status == OutcomeStatus.OK


class ScrapeReport(BaseModel):
    """Every outcome of one scrape; callers decide what an all-skipped run means."""

    outcomes: List[Outcome] = Field(default_factory=list)

    @property
    def meetings(self) -> List[Any]:
        return [o.value for o in self.outcomes if o.is_ok]

    @property
    def skipped(self) -> List[Outcome]:
        return [o for o in self.outcomes if not o.is_ok]

    @property
    def all_skipped(self) -> bool:
        return bool(self.outcomes) and not self.meetings
