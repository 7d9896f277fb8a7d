"""Shared pytest fixtures and configuration."""

import pytest

from tichnuta.site_store import SiteStore


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def store():
    """Create an in-memory SiteStore."""
    s = SiteStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def valid_form() -> dict[str, str]:
    """Registration form values that pass validation."""
    return {
        "name": "דנה לוי",
        "phone": "050-1234567",
        "email": "dana@tichnuta.co.il",
        "course": "Python for Kids",
        "location": "Center A",
        "grade": "ה",
        "time": "Sunday 17:00",
        "gender": "בנות",
        "learning_period": "",
        "message": "",
    }
