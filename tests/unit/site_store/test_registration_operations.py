"""Unit tests for SiteStore registration operations."""

import pytest

from tichnuta.site_store import RegistrationNotFoundError, RegistrationStatus, SiteStore


def register(store: SiteStore, name: str = "דנה לוי", **fields):
    values = {
        "phone": "050-1234567",
        "email": "dana@tichnuta.co.il",
        "course": "Python for Kids",
        "location": "Center A",
        "grade": "ה",
        "time": "Sunday 17:00",
        "gender": "בנות",
    }
    values.update(fields)
    return store.create_registration(name=name, **values)


@pytest.mark.unit
class TestCreateRegistration:
    """Tests for create_registration."""

    def test_create_sets_status_new(self, store: SiteStore) -> None:
        registration = register(store)

        assert registration.id is not None
        assert registration.status == "new"
        assert registration.registration_status == RegistrationStatus.NEW
        assert registration.learning_period is None
        assert registration.school_name is None

    def test_create_with_school(self, store: SiteStore) -> None:
        registration = register(store, school_name="אורט")
        assert store.get_registration(registration.id).school_name == "אורט"

    def test_get_missing(self, store: SiteStore) -> None:
        with pytest.raises(RegistrationNotFoundError):
            store.get_registration("missing")


@pytest.mark.unit
class TestListRegistrations:
    """Tests for list_registrations and count_registrations_by_status."""

    def test_newest_first(self, store: SiteStore) -> None:
        register(store, "ראשון")
        register(store, "שני")

        assert [r.name for r in store.list_registrations()] == ["שני", "ראשון"]

    def test_filter_by_status(self, store: SiteStore) -> None:
        first = register(store, "ראשון")
        register(store, "שני")
        store.update_registration_status(first.id, RegistrationStatus.CONTACTED)

        contacted = store.list_registrations(status=RegistrationStatus.CONTACTED)

        assert [r.name for r in contacted] == ["ראשון"]

    def test_pagination(self, store: SiteStore) -> None:
        for i in range(5):
            register(store, f"הורה {i}")

        page = store.list_registrations(limit=2, offset=2)

        assert [r.name for r in page] == ["הורה 2", "הורה 1"]

    def test_count_by_status_includes_zeros(self, store: SiteStore) -> None:
        first = register(store)
        register(store)
        store.update_registration_status(first.id, RegistrationStatus.CLOSED)

        assert store.count_registrations_by_status() == {"new": 1, "contacted": 0, "closed": 1}


@pytest.mark.unit
class TestUpdateDeleteRegistration:
    """Tests for update_registration_status and delete_registration."""

    def test_update_status(self, store: SiteStore) -> None:
        registration = register(store)

        updated = store.update_registration_status(registration.id, RegistrationStatus.CONTACTED)

        assert updated.status == "contacted"

    def test_update_missing(self, store: SiteStore) -> None:
        with pytest.raises(RegistrationNotFoundError):
            store.update_registration_status("missing", RegistrationStatus.CLOSED)

    def test_delete(self, store: SiteStore) -> None:
        registration = register(store)

        store.delete_registration(registration.id)

        with pytest.raises(RegistrationNotFoundError):
            store.get_registration(registration.id)
