"""Filtered, sorted, presentation-ready projections of the character list."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable

from birthdaybook.models import Character

ALL_CATEGORIES = "all"
BIRTHDAY_MARKER = "🎂"
UNCATEGORIZED_LABEL = "未分類"


class ViewMode(str, Enum):
    CARD = "card"
    LIST = "list"


@dataclass(frozen=True)
class ViewState:
    """Selected category filter and view mode. Passed into every render."""

    category: str = ALL_CATEGORIES
    mode: ViewMode = ViewMode.CARD

    @property
    def is_filtered(self) -> bool:
        return bool(self.category) and self.category != ALL_CATEGORIES


@dataclass(frozen=True)
class DisplayRow:
    character: Character
    display_name: str
    source_label: str
    is_birthday_today: bool


@dataclass(frozen=True)
class ViewResult:
    state: ViewState
    rows: tuple[DisplayRow, ...]
    categories: tuple[str, ...]
    is_store_empty: bool

    @property
    def no_matches(self) -> bool:
        """Filtering removed everything from a non-empty store."""
        return not self.rows and not self.is_store_empty


def distinct_categories(characters: Iterable[Character]) -> list[str]:
    """Sorted unique non-empty sources."""
    return sorted({c.source for c in characters if c.source})


def reconcile_filter(state: ViewState, categories: Iterable[str]) -> ViewState:
    """Keep the selected category if it still exists, else fall back to all."""
    if state.is_filtered and state.category not in set(categories):
        return replace(state, category=ALL_CATEGORIES)
    return state


def project(
    characters: Iterable[Character],
    state: ViewState,
    today: str,
    categories: Iterable[str] | None = None,
) -> ViewResult:
    """Apply the category filter and view mode, and flag today's birthdays.

    ``categories`` defaults to the distinct sources of ``characters``; pass
    the store's category index to skip the rescan.
    """
    everything = list(characters)
    cats = tuple(categories) if categories is not None else tuple(distinct_categories(everything))

    selected = everything
    if state.is_filtered:
        selected = [c for c in everything if c.source == state.category]

    if state.mode == ViewMode.LIST:
        # MM-DD sorts lexicographically in calendar order; sort() is stable.
        selected = sorted(selected, key=lambda c: c.birthday)

    rows = tuple(_display_row(c, today) for c in selected)
    return ViewResult(state=state, rows=rows, categories=cats, is_store_empty=not everything)


def _display_row(character: Character, today: str) -> DisplayRow:
    is_today = character.birthday == today
    return DisplayRow(
        character=character,
        display_name=f"{character.name} {BIRTHDAY_MARKER}" if is_today else character.name,
        source_label=character.source or UNCATEGORIZED_LABEL,
        is_birthday_today=is_today,
    )


def render_lines(result: ViewResult) -> list[str]:
    """Plain-text rendering for the terminal."""
    if result.is_store_empty:
        return ["(no characters yet)"]
    if result.no_matches:
        return ["沒有符合條件的角色。"]

    lines: list[str] = []
    for row in result.rows:
        c = row.character
        if result.state.mode == ViewMode.LIST:
            lines.append(f"{c.birthday}  {row.display_name}  [{row.source_label}]  ({c.id})")
        else:
            lines.append(f"┌ {row.display_name}  ({c.id})")
            lines.append(f"│ 分類: {row.source_label}")
            lines.append(f"│ 生日: {c.birthday}")
            if c.image:
                lines.append("│ 圖片: yes")
            lines.append("└")
    return lines
