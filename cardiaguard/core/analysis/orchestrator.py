"""
Analysis Orchestrator

Drives one analysis request lifecycle for the session:

    idle -> pending -> settled(success | failure) -> idle

Every submission writes the same status/result/error slots when it
settles, so with overlapping submissions the last one to settle is what
the consumer sees. A failure never touches the stored result.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from cardiaguard.config import GENERIC_ANALYSIS_ERROR
from cardiaguard.core.features import FeatureRecord
from cardiaguard.utils import CardiaGuardError, get_logger

logger = get_logger(__name__)

AnalyzeFn = Callable[[FeatureRecord], Awaitable[Any]]


class AnalysisStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SETTLED = "settled"


class AnalysisOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class AnalysisState:
    """Point-in-time view of the orchestrator for the consumer."""
    status: AnalysisStatus
    outcome: Optional[AnalysisOutcome]
    result: Any
    error: Optional[str]
    submissions: int
    in_flight: int

    @property
    def is_pending(self) -> bool:
        return self.status == AnalysisStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        result = self.result
        if result is not None and hasattr(result, "to_dict"):
            result = result.to_dict()
        return {
            "status": self.status.value,
            "outcome": self.outcome.value if self.outcome else None,
            "result": result,
            "error": self.error,
            "submissions": self.submissions,
            "in_flight": self.in_flight,
        }


def failure_message(error: BaseException, fallback: str = GENERIC_ANALYSIS_ERROR) -> str:
    """Human-readable message for ``error``, or ``fallback`` if it has none."""
    if isinstance(error, CardiaGuardError):
        message = error.message
    else:
        message = str(error)
    return message.strip() or fallback


class AnalysisOrchestrator:
    """
    Runs analysis requests against an async capability.

    Args:
        analyze: coroutine function taking a FeatureRecord, returning a
            result record or raising on failure
        on_result: called with each successful result (the consumer's
            cue to bring it into view)
        fallback_message: shown when a failure carries no message
    """

    def __init__(
        self,
        analyze: AnalyzeFn,
        on_result: Optional[Callable[[Any], None]] = None,
        fallback_message: str = GENERIC_ANALYSIS_ERROR,
    ):
        self._analyze = analyze
        self._on_result = on_result
        self._fallback_message = fallback_message

        self._status = AnalysisStatus.IDLE
        self._outcome: Optional[AnalysisOutcome] = None
        self._result: Any = None
        self._error: Optional[str] = None
        self._submissions = 0
        self._in_flight = 0

    @property
    def status(self) -> AnalysisStatus:
        return self._status

    @property
    def outcome(self) -> Optional[AnalysisOutcome]:
        return self._outcome

    @property
    def result(self) -> Any:
        return self._result

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def state(self) -> AnalysisState:
        return AnalysisState(
            status=self._status,
            outcome=self._outcome,
            result=self._result,
            error=self._error,
            submissions=self._submissions,
            in_flight=self._in_flight,
        )

    async def submit(self, record: FeatureRecord) -> Optional[Any]:
        """
        Analyze ``record`` and settle the shared state.

        The record is captured at call time; later edits do not reach this
        request. Returns the result, or None if the request failed.
        """
        self._submissions += 1
        submission = self._submissions
        previous = (self._status, self._outcome, self._error)
        self._in_flight += 1
        self._status = AnalysisStatus.PENDING
        self._outcome = None
        self._error = None
        logger.info(f"Analysis #{submission} submitted")

        try:
            result = await self._analyze(record)
        except asyncio.CancelledError:
            # Nothing else will settle the slots; put back what was visible
            if self._in_flight == 1 and self._status == AnalysisStatus.PENDING:
                self._status, self._outcome, self._error = previous
            logger.warning(f"Analysis #{submission} cancelled")
            raise
        except Exception as e:
            self._error = failure_message(e, self._fallback_message)
            self._outcome = AnalysisOutcome.FAILURE
            self._status = AnalysisStatus.SETTLED
            logger.error(f"Analysis #{submission} failed: {self._error}")
            return None
        finally:
            self._in_flight -= 1

        self._result = result
        self._outcome = AnalysisOutcome.SUCCESS
        self._status = AnalysisStatus.SETTLED
        logger.info(f"Analysis #{submission} succeeded")

        if self._on_result is not None:
            self._on_result(result)
        return result

    def reset(self) -> None:
        """Return a settled orchestrator to idle; the last result is kept."""
        if self._status != AnalysisStatus.SETTLED:
            return
        self._status = AnalysisStatus.IDLE
        self._outcome = None
        self._error = None
