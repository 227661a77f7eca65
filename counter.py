"""Read-then-write increment of a named sequence counter.

The SELECT and the UPDATE are two independent statements with no row lock
between them, so two overlapping calls for the same sequence can both read
``N`` and both write ``N + 1``.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from database import DriverUnavailable
from models import SequenceCounter

logger = logging.getLogger(__name__)

NOT_FOUND = -1


class Failure(enum.Enum):
    DRIVER_UNAVAILABLE = "driver_unavailable"
    QUERY_FAILED = "query_failed"
    UPDATE_FAILED = "update_failed"


@dataclass(frozen=True)
class Counted:
    visit_count: int


@dataclass(frozen=True)
class Failed:
    reason: Failure


Result = Union[Counted, Failed]


def _failed(reason, error):
    logger.error("API Call Failed : %s (%s)", error, reason.value, exc_info=error)
    return Failed(reason)


def increment_sequence(database, sequence_name: str, pause: Optional[Callable[[], None]] = None) -> Result:
    try:
        session_factory = database.sessionmaker()
    except DriverUnavailable as e:
        return _failed(Failure.DRIVER_UNAVAILABLE, e)

    with session_factory() as db:
        try:
            counter = db.query(SequenceCounter).filter(SequenceCounter.sequence_name == sequence_name).first()
        except SQLAlchemyError as e:
            return _failed(Failure.QUERY_FAILED, e)

        count, sequence_id = NOT_FOUND, NOT_FOUND
        if counter is not None:
            count, sequence_id = counter.sequence_count, counter.id

        if pause is not None:
            pause()

        # Aucune ligne touchée si la séquence est inconnue (id = -1)
        try:
            db.query(SequenceCounter).filter(SequenceCounter.id == sequence_id).update(
                {SequenceCounter.sequence_count: count + 1}, synchronize_session=False
            )
            db.commit()
        except SQLAlchemyError as e:
            return _failed(Failure.UPDATE_FAILED, e)

    logger.info("API Call Success")
    return Counted(count + 1)
