"""Editable site copy: built-in defaults overlaid with the back office's edits."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tichnuta.site_store import SiteStore

DEFAULT_SITE_COPY: dict[str, Any] = {
    "heroTitle": "העתיד מתחיל כאן",
    "heroSubtitle": "חוגי תכנות חווייתיים לילדים",
    "heroDescription": (
        "הילדים בונים משחקים, יוצרים אפליקציות ולומדים לחשוב כמו מהנדסים"
        " - בסביבה מקצועית, ערכית ומהנה."
    ),
    "heroButtonText": "גלה את הקורסים שלנו",
    "aboutTitle": "אודות תכנותא",
    "missionTitle": "המשימה שלנו",
    "studentsCount": "200+",
    "experienceYears": "5",
    "satisfactionRate": "95%",
    "values": [
        {"title": "חינוך ערכי", "description": "לימוד תכנות בסביבה מותאמת עם דגש על ערכים"},
        {"title": "איכות מקצועית", "description": "מורים מקצועיים ומנוסים עם תוכניות לימוד מתקדמות"},
        {"title": "קבוצות קטנות", "description": "למידה אישית וממוקדת בקבוצות קטנות"},
        {"title": "הוכחת הצלחה", "description": "תלמידים שלנו ממשיכים ללימודי הנדסה ומחשבים"},
    ],
    "coursesTitle": "הקורסים שלנו",
    "coursesSubtitle": "קורסי תכנות מותאמים לכל גיל ורמה, עם דגש על למידה מהנה ויעילה",
    "contactPhone": "053-271-2650",
    "contactEmail": "info@tichnuta.com",
    "contactAddress": "רחוב לוחמי הגטו 32 פתח תקווה",
    "footerDescription": "תכנותא - חוגי תכנות מקצועיים לילדים",
}


class UnknownCopyKeyError(KeyError):
    """A copy key that the site does not render."""


def get_site_copy(store: SiteStore) -> dict[str, Any]:
    """Defaults with stored edits applied on top."""
    return {**DEFAULT_SITE_COPY, **store.get_site_content()}


def update_site_copy(store: SiteStore, changes: dict[str, Any]) -> dict[str, Any]:
    """Store edits to known copy keys and return the merged copy.

    Raises:
        UnknownCopyKeyError: If a key has no default, i.e. the site never shows it.
    """
    unknown = sorted(set(changes) - set(DEFAULT_SITE_COPY))
    if unknown:
        raise UnknownCopyKeyError(f"Unknown site copy keys: {', '.join(unknown)}")
    store.set_site_content(changes)
    return get_site_copy(store)


def reset_site_copy(store: SiteStore) -> dict[str, Any]:
    """Drop all edits and return the defaults."""
    store.reset_site_content()
    return dict(DEFAULT_SITE_COPY)
