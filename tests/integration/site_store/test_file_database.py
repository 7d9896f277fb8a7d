"""Integration tests for SiteStore on a database file."""

import tempfile
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import text

from tichnuta.site_store import SiteStore


@pytest.fixture
def db_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield str(Path(tmpdir) / "site.db")


@pytest.mark.integration
class TestFileDatabase:
    """Data survives reopening the store."""

    def test_data_persists_across_reopen(self, db_path: str) -> None:
        store = SiteStore(db_path)
        course = store.create_course("Python", slug="python", times=["Mon 10:00"])
        store.add_period(course.id, "א", date(2025, 9, 1), date(2026, 1, 31))
        store.set_site_content({"heroTitle": "שלום"})
        store.close()

        reopened = SiteStore(db_path)
        try:
            found = reopened.find_course("python")
            assert found.times == ["Mon 10:00"]
            assert reopened.list_periods(course.id)[0].start_date == date(2025, 9, 1)
            assert reopened.get_site_content() == {"heroTitle": "שלום"}
        finally:
            reopened.close()

    def test_wal_and_foreign_keys_enabled(self, db_path: str) -> None:
        store = SiteStore(db_path)
        try:
            with store._db.session() as session:
                assert session.execute(text("PRAGMA journal_mode")).scalar() == "wal"
                assert session.execute(text("PRAGMA foreign_keys")).scalar() == 1
        finally:
            store.close()
