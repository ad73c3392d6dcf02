"""Tests for the idempotent create-if-absent protocol."""
import threading
from types import SimpleNamespace
from unittest.mock import MagicMock

from authz_admin.core.operation_result import ResultStatus
from authz_admin.core.reconcile import reconcile, reconcile_lookup


def resources(*names):
    return [SimpleNamespace(id=f"id-{name}", name=name) for name in names]


def test_existing_name_returns_already_exists():
    create = MagicMock()

    result = reconcile("Acme", lambda: resources("Acme"), create, label="Tenant")

    assert result.status is ResultStatus.ALREADY_EXISTS
    assert result.data.id == "id-Acme"
    assert result.message == "Tenant 'Acme' already exists"
    create.assert_not_called()


def test_missing_name_creates_exactly_once():
    created = SimpleNamespace(id="new", name="Acme")
    create = MagicMock(return_value=created)

    result = reconcile("Acme", lambda: resources("Other"), create, label="Tenant")

    assert result.status is ResultStatus.CREATED
    assert result.data is created
    assert result.message == "Tenant 'Acme' created successfully"
    create.assert_called_once_with()


def test_match_is_case_sensitive():
    create = MagicMock(return_value=SimpleNamespace(name="acme"))

    result = reconcile("acme", lambda: resources("Acme"), create)

    assert result.status is ResultStatus.CREATED


def test_custom_name_extractor():
    listed = [{"name": "Portal"}]

    result = reconcile("Portal", lambda: listed, MagicMock(), name_of=lambda item: item["name"])

    assert result.status is ResultStatus.ALREADY_EXISTS
    assert result.data == {"name": "Portal"}


def test_concurrent_callers_may_both_create():
    """The list-then-create sequence is not atomic; both racers may create."""
    backend = []
    both_listed = threading.Barrier(2)
    lock = threading.Lock()
    results = []

    def list_existing():
        snapshot = list(backend)
        both_listed.wait(timeout=5)
        return snapshot

    def create():
        with lock:
            backend.append(SimpleNamespace(name="Acme"))
            return backend[-1]

    def worker():
        results.append(reconcile("Acme", list_existing, create))

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert [r.status for r in results] == [ResultStatus.CREATED, ResultStatus.CREATED]
    assert len(backend) == 2


class TestReconcileLookup:
    def test_found(self):
        create = MagicMock()
        result = reconcile_lookup("alice", lambda: {"userId": "U1"}, create, label="User")

        assert result.status is ResultStatus.ALREADY_EXISTS
        assert result.message == "User 'alice' already exists"
        create.assert_not_called()

    def test_not_found(self):
        create = MagicMock(return_value={"userId": "U2"})
        result = reconcile_lookup("alice", lambda: None, create, label="User")

        assert result.status is ResultStatus.CREATED
        assert result.data == {"userId": "U2"}
        create.assert_called_once_with()
