from __future__ import annotations

import pytest
from django.db import IntegrityError, OperationalError

from modules.core.exceptions import Conflict, NotFound, StorageFailure
from modules.core.repositories.atomic import atomic_unit

pytestmark = pytest.mark.unit


class TestAtomicUnit:
    def test_integrity_error_becomes_conflict(self):
        with pytest.raises(Conflict):
            with atomic_unit("test.unit"):
                raise IntegrityError("duplicate key")

    def test_database_error_becomes_storage_failure(self):
        with pytest.raises(StorageFailure) as excinfo:
            with atomic_unit("test.unit"):
                raise OperationalError("connection lost")
        assert excinfo.value.retryable

    def test_domain_errors_pass_through(self):
        with pytest.raises(NotFound):
            with atomic_unit("test.unit"):
                raise NotFound("missing")

    def test_usable_as_decorator(self):
        @atomic_unit("test.decorated")
        def explode():
            raise IntegrityError("duplicate key")

        with pytest.raises(Conflict):
            explode()
        with pytest.raises(Conflict):
            explode()
