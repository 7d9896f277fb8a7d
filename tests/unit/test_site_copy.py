"""Unit tests for editable site copy."""

import pytest

from tichnuta.site_copy import (
    DEFAULT_SITE_COPY,
    UnknownCopyKeyError,
    get_site_copy,
    reset_site_copy,
    update_site_copy,
)
from tichnuta.site_store import SiteStore


@pytest.mark.unit
class TestSiteCopy:
    """Tests for get/update/reset of site copy."""

    def test_defaults_when_nothing_stored(self, store: SiteStore) -> None:
        assert get_site_copy(store) == DEFAULT_SITE_COPY

    def test_update_overrides_default(self, store: SiteStore) -> None:
        copy = update_site_copy(store, {"heroTitle": "כותרת חדשה"})

        assert copy["heroTitle"] == "כותרת חדשה"
        assert copy["heroSubtitle"] == DEFAULT_SITE_COPY["heroSubtitle"]
        assert get_site_copy(store)["heroTitle"] == "כותרת חדשה"

    def test_unknown_key_rejected(self, store: SiteStore) -> None:
        with pytest.raises(UnknownCopyKeyError, match="bannerText"):
            update_site_copy(store, {"bannerText": "x", "heroTitle": "y"})
        assert store.get_site_content() == {}

    def test_reset(self, store: SiteStore) -> None:
        update_site_copy(store, {"heroTitle": "x"})

        assert reset_site_copy(store) == DEFAULT_SITE_COPY
        assert get_site_copy(store) == DEFAULT_SITE_COPY
