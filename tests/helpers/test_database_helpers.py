"""Tests for database helpers."""

from __future__ import annotations

from datetime import datetime

import pytest

import chronos_guru.helpers.database_helpers as dbh


@pytest.mark.unit
def test_get_db_is_lazy_singleton() -> None:
    """The handle is created once and reused."""
    assert dbh._db is None
    db = dbh.get_db()
    assert dbh.get_db() is db
    assert db.name.startswith("testdb_")


@pytest.mark.unit
def test_get_db_requires_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without MONGO_URI there is no database."""
    monkeypatch.delenv("MONGO_URI")
    with pytest.raises(RuntimeError, match="MONGO_URI"):
        dbh.get_db()


@pytest.mark.unit
def test_document_roundtrip() -> None:
    """Documents are stored whole and overwritten whole."""
    assert dbh.get_document("progress-a") is None

    dbh.put_document("progress-a", '{"points": 10}')
    dbh.put_document("progress-a", '{"points": 20}')

    assert dbh.get_document("progress-a") == '{"points": 20}'
    col = dbh.get_db()[dbh.PROGRESS_COL]
    assert col.count_documents({"key": "progress-a"}) == 1
    doc = col.find_one({"key": "progress-a"})
    assert isinstance(doc[dbh.DEFAULT_UPDATEDAT_FIELD], datetime)


@pytest.mark.unit
def test_non_text_document_reads_as_missing() -> None:
    """A document field that is not text is ignored."""
    dbh.get_db()[dbh.PROGRESS_COL].insert_one({"key": "odd", dbh.DOCUMENT_FIELD: 42})
    assert dbh.get_document("odd") is None


@pytest.mark.unit
def test_delete_document() -> None:
    """Deleting reports whether something was removed."""
    dbh.put_document("progress-b", "{}")
    assert dbh.delete_document("progress-b") is True
    assert dbh.delete_document("progress-b") is False
    assert dbh.get_document("progress-b") is None
