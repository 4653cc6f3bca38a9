"""Fixed vocabularies attached to notes.

The store treats every id below as an opaque string and never checks
membership; these tables exist for presentation layers (labels, colors,
badge counts).
"""

from __future__ import annotations

from dataclasses import dataclass

ALL_CATEGORY = "all"


@dataclass(frozen=True)
class Category:
    """A note category shown as a filter chip."""

    id: str
    name: str
    icon: str
    color: str
    light_color: str


@dataclass(frozen=True)
class Priority:
    """A priority level; drives the card border color."""

    id: str
    name: str
    color: str


@dataclass(frozen=True)
class Tag:
    """A tag from the fixed tag vocabulary."""

    id: str
    name: str
    color: str


@dataclass(frozen=True)
class NoteColor:
    """A named background color from the palette."""

    id: str
    color: str
    name: str


CATEGORIES: tuple[Category, ...] = (
    Category(ALL_CATEGORY, "All Notes", "documents", "#7C5CE9", "#EAE6FC"),
    Category("work", "Work Ideas", "briefcase", "#00B8A9", "#E0F5F3"),
    Category("personal", "Personal", "person", "#F8B195", "#FFE8E0"),
    Category("projects", "Future Projects", "rocket", "#5C95FF", "#E5EDFF"),
)

PRIORITIES: tuple[Priority, ...] = (
    Priority("high", "High", "#FF5252"),
    Priority("medium", "Medium", "#FFC107"),
    Priority("low", "Low", "#4CAF50"),
)

TAGS: tuple[Tag, ...] = (
    Tag("work", "Work", "#4A90E2"),
    Tag("personal", "Personal", "#50E3C2"),
    Tag("ideas", "Ideas", "#F5A623"),
    Tag("todo", "To-Do", "#D0021B"),
    Tag("important", "Important", "#7ED321"),
    Tag("archive", "Archive", "#9013FE"),
)

NOTE_COLORS: tuple[NoteColor, ...] = (
    NoteColor("default", "#FFFFFF", "White"),
    NoteColor("lavender", "#E6E6FA", "Lavender"),
    NoteColor("mint", "#E0F5E9", "Mint"),
    NoteColor("peach", "#FFE5D9", "Peach"),
    NoteColor("sky", "#E1F5FE", "Sky Blue"),
    NoteColor("cream", "#FFF8DC", "Cream"),
    NoteColor("rose", "#FFE4E1", "Rose"),
    NoteColor("sage", "#E0EEE0", "Sage"),
    NoteColor("lemon", "#FFFACD", "Lemon"),
    NoteColor("lilac", "#E6E6FF", "Lilac"),
)

TEXT_COLORS: tuple[str, ...] = (
    "#000000",
    "#FFFFFF",
    "#2196F3",
    "#4CAF50",
    "#E91E63",
    "#FF9800",
    "#9C27B0",
    "#F44336",
    "#607D8B",
    "#795548",
)

# Border color for notes without a priority.
DEFAULT_PRIORITY_COLOR = "#2196F3"


def category_ids() -> list[str]:
    """Return category ids in display order, ``"all"`` first."""
    return [category.id for category in CATEGORIES]


def find_category(category_id: str | None) -> Category | None:
    """Look up a category by id."""
    return next((c for c in CATEGORIES if c.id == category_id), None)


def priority_color(priority_id: str | None) -> str:
    """Return the border color for a priority, falling back to the default."""
    match = next((p for p in PRIORITIES if p.id == priority_id), None)
    return match.color if match else DEFAULT_PRIORITY_COLOR
