from collections import deque
from typing import Deque, List

from workout_session.models.schemas import FeedbackRecord
from workout_session.utils.logging_utils import logger


class FeedbackService:
    """
    Analytics sink for early-exit feedback.
    Records are logged and kept in a bounded in-memory buffer; delivery is fire-and-forget and never retried.
    """

    def __init__(self, max_records: int = 1000):
        self._records: Deque[FeedbackRecord] = deque(maxlen=max_records)

    def submit(self, record: FeedbackRecord) -> None:
        """Store one feedback record. Callers must not rely on it succeeding."""
        self._records.append(record)
        logger.info(
            f"Feedback: plan='{record.planName}' exercise='{record.exerciseName}' set={record.setNumber} "
            f"reason={record.reason.value} elapsed={record.elapsedSeconds}s"
        )

    def recent(self, limit: int = 50) -> List[FeedbackRecord]:
        """Most recent records, newest last"""
        return list(self._records)[-limit:]

    def clear(self) -> None:
        self._records.clear()

# Global service instance
feedback_service = FeedbackService()
