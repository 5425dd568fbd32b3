"""
Normalization of Apify run-completion callbacks.

Apify reports the end of a run in two vocabularies: webhook event types
(``ACTOR.RUN.SUCCEEDED`` …) and run statuses (``SUCCEEDED``, ``TIMED-OUT`` …).
Both are folded into one tagged union at the boundary so the handler only
ever dispatches on the outcome type.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class RunSucceeded:
    dataset_id: str | None


@dataclass(frozen=True)
class RunFailed:
    reason: str


@dataclass(frozen=True)
class UnrecognizedOutcome:
    raw: str | None

    @property
    def reason(self) -> str:
        if self.raw is None:
            return "Unrecognized webhook payload: no event or status provided"
        return f"Unrecognized webhook event/status: {self.raw}"


RunOutcome = RunSucceeded | RunFailed | UnrecognizedOutcome

_SUCCEEDED = "succeeded"
_FAILED = "failed"
_TIMED_OUT = "timed_out"
_ABORTED = "aborted"

EVENT_TYPES: dict[str, str] = {
    "ACTOR.RUN.SUCCEEDED": _SUCCEEDED,
    "ACTOR.RUN.FAILED": _FAILED,
    "ACTOR.RUN.TIMED_OUT": _TIMED_OUT,
    "ACTOR.RUN.ABORTED": _ABORTED,
}

RUN_STATUSES: dict[str, str] = {
    "SUCCEEDED": _SUCCEEDED,
    "FAILED": _FAILED,
    "TIMED-OUT": _TIMED_OUT,
    "TIMED_OUT": _TIMED_OUT,
    "ABORTED": _ABORTED,
}

FAILURE_REASONS: dict[str, str] = {
    _FAILED: "Scraping failed",
    _TIMED_OUT: "Scraping timed out",
    _ABORTED: "Scraping aborted",
}


def classify_run(
    *, event: str | None, status: str | None, dataset_id: str | None
) -> RunOutcome:
    """Map one callback onto exactly one outcome; ``event`` wins over ``status``."""
    if event:
        kind = EVENT_TYPES.get(event)
        raw = event
    elif status:
        kind = RUN_STATUSES.get(status.upper())
        raw = status
    else:
        return UnrecognizedOutcome(raw=None)

    if kind is None:
        return UnrecognizedOutcome(raw=raw)

    if kind == _SUCCEEDED:
        return RunSucceeded(dataset_id=dataset_id or None)

    return RunFailed(reason=FAILURE_REASONS[kind])
