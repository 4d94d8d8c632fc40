"""Transactional unit-of-work boundary with storage error translation.

``atomic_unit`` wraps ``transaction.atomic()`` and converts driver-level
failures into domain errors so nothing above the repository layer sees a
``django.db`` exception:

- ``IntegrityError`` -> ``Conflict`` (unique / FK violation).
- any other ``DatabaseError`` -> ``StorageFailure`` (transient, retryable).

Domain errors raised inside the block propagate unchanged after the
transaction is rolled back.  Usable as a context manager or decorator.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import structlog
from django.db import DatabaseError, IntegrityError, transaction

from modules.core.exceptions import Conflict, StorageFailure

logger = structlog.get_logger(__name__)


@contextmanager
def atomic_unit(label: str) -> Iterator[None]:
    try:
        with transaction.atomic():
            yield
    except IntegrityError as exc:
        logger.warning("storage.integrity_violation", unit=label, error=str(exc))
        raise Conflict(f"{label}: conflicting write rejected by storage.") from exc
    except DatabaseError as exc:
        logger.error("storage.transaction_failed", unit=label, error=str(exc))
        raise StorageFailure(f"{label}: storage failure, safe to retry.") from exc
