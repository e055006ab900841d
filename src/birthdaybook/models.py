"""Character record model and birthday key normalization."""

from __future__ import annotations

import re
from dataclasses import dataclass

from birthdaybook.errors import ValidationError

# Stored form: always zero-padded.
CANONICAL_BIRTHDAY = re.compile(r"^\d{2}-\d{2}$")
# Accepted on input (forms and tabular import): 1-2 digit month and day.
LOOSE_BIRTHDAY = re.compile(r"^(\d{1,2})-(\d{1,2})$")
# Full date from a date picker; the year is dropped.
ISO_DATE = re.compile(r"^\d{4}-(\d{1,2})-(\d{1,2})$")

# Feb allows 29 since no year is stored.
DAYS_IN_MONTH = (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

OWNER_BIRTHDAY_KEY = "userBirthday"

# Tabular column names, in export order.
EXPORT_COLUMNS = ("name", "birthday", "source", "userBirthdayMessage")


@dataclass(frozen=True)
class Character:
    """A registered character. ``id`` is assigned by the store."""

    id: str
    name: str
    birthday: str
    source: str = ""
    image: str = ""
    user_birthday_message: str = ""

    def to_row(self) -> dict[str, str]:
        """Flat tabular row without the id and image fields."""
        return {
            "name": self.name,
            "birthday": self.birthday,
            "source": self.source,
            "userBirthdayMessage": self.user_birthday_message,
        }


@dataclass(frozen=True)
class CharacterDraft:
    """Mutable fields of a character, as supplied by a form or an import row.

    ``image=None`` means "no new image": updates keep the stored one,
    creates store an empty string.
    """

    name: str
    birthday: str
    source: str = ""
    user_birthday_message: str = ""
    image: str | None = None


def normalize_birthday(value: object) -> str:
    """Return the canonical ``MM-DD`` key for a loosely formatted birthday.

    Accepts ``M-D``, ``MM-DD`` and ``YYYY-MM-DD``. Raises ValidationError when
    the text does not match or names a day that never exists.
    """
    text = str(value if value is not None else "").strip()
    match = LOOSE_BIRTHDAY.match(text) or ISO_DATE.match(text)
    if not match:
        raise ValidationError("birthday", value, "expected MM-DD")
    month, day = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationError("birthday", value, f"month {month} out of range")
    if not 1 <= day <= DAYS_IN_MONTH[month - 1]:
        raise ValidationError("birthday", value, f"day {day} out of range for month {month}")
    return f"{month:02d}-{day:02d}"


def validate_draft(draft: CharacterDraft) -> CharacterDraft:
    """Check required fields and return a draft with normalized values."""
    name = (draft.name or "").strip()
    if not name:
        raise ValidationError("name", draft.name, "name is required")
    return CharacterDraft(
        name=name,
        birthday=normalize_birthday(draft.birthday),
        source=(draft.source or "").strip(),
        user_birthday_message=draft.user_birthday_message or "",
        image=draft.image,
    )
