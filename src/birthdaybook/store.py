"""Character store — one Markdown file per character.

Markdown files are the source of truth. Fields live in YAML frontmatter.
An in-memory index (built once at startup, updated incrementally on writes)
serves lookups and the category list without rescanning the disk.
"""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import frontmatter

from birthdaybook.errors import NotFound, PersistenceFailure, ValidationError
from birthdaybook.models import CANONICAL_BIRTHDAY, Character, CharacterDraft

logger = logging.getLogger(__name__)

MAX_VERSIONS_PER_RECORD = 10


@dataclass
class BulkResult:
    """Outcome of a best-effort bulk create."""

    created: list[str] = field(default_factory=list)
    failures: list[tuple[CharacterDraft, str]] = field(default_factory=list)


class CharacterStore:
    """Read/write access to characters and settings under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self._index: dict[str, Character] = {}
        self._categories: dict[str, set[str]] = {}
        self._ensure_initialized()
        self._build_index()

    # ── Initialization ────────────────────────────────────────

    def _ensure_initialized(self) -> None:
        """Ensure base directories exist. Idempotent."""
        try:
            for d in ["characters", ".versions"]:
                (self.root / d).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceFailure("init", self.root, e) from e

    @property
    def characters_dir(self) -> Path:
        return self.root / "characters"

    @property
    def settings_file(self) -> Path:
        return self.root / "settings.md"

    # ── In-memory index ───────────────────────────────────────

    def _build_index(self) -> None:
        """Scan characters/ once at startup, build the id and category indexes."""
        self._index.clear()
        self._categories.clear()
        loaded: list[tuple[str, Character]] = []
        for md_file in self.characters_dir.glob("*.md"):
            meta = self._parse_frontmatter(md_file)
            if not meta:
                logger.warning("Skipping unreadable character file %s", md_file)
                continue
            loaded.append((str(meta.get("created", "")), self._from_meta(md_file.stem, meta)))
        for _, character in sorted(loaded, key=lambda item: (item[0], item[1].id)):
            self._index_put(character)
        logger.debug("Indexed %d characters from %s", len(self._index), self.characters_dir)

    def _index_put(self, character: Character) -> None:
        self._index_drop(character.id)
        self._index[character.id] = character
        if character.source:
            self._categories.setdefault(character.source, set()).add(character.id)

    def _index_drop(self, record_id: str) -> None:
        old = self._index.pop(record_id, None)
        if old and old.source:
            members = self._categories.get(old.source)
            if members is not None:
                members.discard(record_id)
                if not members:
                    del self._categories[old.source]

    def _parse_frontmatter(self, path: Path) -> dict:
        """Parse YAML frontmatter from a markdown file."""
        try:
            post = frontmatter.load(str(path))
            return dict(post.metadata)
        except Exception:
            return {}

    @staticmethod
    def _from_meta(record_id: str, meta: dict) -> Character:
        return Character(
            id=record_id,
            name=str(meta.get("name", "")),
            birthday=str(meta.get("birthday", "")),
            source=str(meta.get("source") or ""),
            image=str(meta.get("image") or ""),
            user_birthday_message=str(meta.get("userBirthdayMessage") or ""),
        )

    # ── File paths & writes ───────────────────────────────────

    def _path(self, record_id: str) -> Path:
        return self.characters_dir / f"{record_id}.md"

    def _new_id(self) -> str:
        while True:
            record_id = secrets.token_hex(6)
            if record_id not in self._index and not self._path(record_id).exists():
                return record_id

    def _write_character(self, character: Character, created: str | None = None) -> None:
        """Render and atomically write a character file."""
        ts = datetime.now().isoformat(timespec="seconds")
        post = frontmatter.Post(
            f"# {character.name}\n",
            name=character.name,
            birthday=character.birthday,
            source=character.source,
            userBirthdayMessage=character.user_birthday_message,
            image=character.image,
            created=created or ts,
            updated=ts,
        )
        self._atomic_write(self._path(character.id), frontmatter.dumps(post) + "\n")

    def _atomic_write(self, path: Path, text: str) -> None:
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise PersistenceFailure("write", path, e) from e

    def _backup(self, path: Path) -> None:
        """Backup to .versions/, keep at most 10 versions per record."""
        if not path.exists():
            return
        versions_dir = self.root / ".versions"
        ts = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        try:
            versions_dir.mkdir(exist_ok=True)
            (versions_dir / f"{path.stem}-{ts}.md").write_text(
                path.read_text(encoding="utf-8"), encoding="utf-8"
            )
        except OSError as e:
            raise PersistenceFailure("backup", path, e) from e
        old = sorted(versions_dir.glob(f"{path.stem}-*.md"))
        for f in old[:-MAX_VERSIONS_PER_RECORD]:
            try:
                f.unlink()
            except OSError as e:
                logger.warning("Could not prune old version %s: %s", f, e)

    @staticmethod
    def _check_birthday(birthday: str) -> None:
        if not CANONICAL_BIRTHDAY.match(birthday):
            raise ValidationError("birthday", birthday, "stored birthdays must be MM-DD")

    # ── Record CRUD ───────────────────────────────────────────

    def create(self, draft: CharacterDraft) -> str:
        """Persist a new character and return its id."""
        self._check_birthday(draft.birthday)
        character = Character(
            id=self._new_id(),
            name=draft.name,
            birthday=draft.birthday,
            source=draft.source,
            image=draft.image or "",
            user_birthday_message=draft.user_birthday_message,
        )
        self._write_character(character)
        self._index_put(character)
        logger.info("Created character %s (%s)", character.name, character.id)
        return character.id

    def update(self, record_id: str, draft: CharacterDraft) -> Character:
        """Replace the mutable fields of a character. ``image=None`` keeps the old image."""
        old = self.get(record_id)
        self._check_birthday(draft.birthday)
        character = Character(
            id=record_id,
            name=draft.name,
            birthday=draft.birthday,
            source=draft.source,
            image=old.image if draft.image is None else draft.image,
            user_birthday_message=draft.user_birthday_message,
        )
        path = self._path(record_id)
        created = self._parse_frontmatter(path).get("created")
        self._backup(path)
        self._write_character(character, created=str(created) if created else None)
        self._index_put(character)
        logger.info("Updated character %s (%s)", character.name, record_id)
        return character

    def delete(self, record_id: str) -> bool:
        """Delete a character (auto-backup). Returns False when it was already gone."""
        path = self._path(record_id)
        if record_id not in self._index and not path.exists():
            logger.debug("Delete of unknown character %s ignored", record_id)
            return False
        self._backup(path)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceFailure("delete", path, e) from e
        self._index_drop(record_id)
        logger.info("Deleted character %s", record_id)
        return True

    def get(self, record_id: str) -> Character:
        character = self._index.get(record_id)
        if character is None:
            raise NotFound(record_id)
        return character

    def list(self) -> list[Character]:
        return list(self._index.values())

    def find_by_birthday(self, key: str) -> list[Character]:
        """Equality lookup on the birthday key, in store order."""
        return [c for c in self._index.values() if c.birthday == key]

    def categories(self) -> list[str]:
        """Sorted distinct non-empty sources, served from the category index."""
        return sorted(self._categories)

    def bulk_create(self, drafts: list[CharacterDraft]) -> BulkResult:
        """Create many characters. Best-effort: a failed write does not stop the rest."""
        result = BulkResult()
        for draft in drafts:
            try:
                result.created.append(self.create(draft))
            except (PersistenceFailure, ValidationError) as e:
                logger.warning("Bulk create skipped %s: %s", draft.name, e)
                result.failures.append((draft, str(e)))
        return result

    # ── Settings ──────────────────────────────────────────────

    def _read_settings(self) -> dict:
        if not self.settings_file.exists():
            return {}
        return self._parse_frontmatter(self.settings_file)

    def get_setting(self, key: str) -> str | None:
        value = self._read_settings().get(key)
        return None if value is None else str(value)

    def put_setting(self, key: str, value: str) -> None:
        settings = self._read_settings()
        settings[key] = value
        post = frontmatter.Post("# Settings\n", **settings)
        self._atomic_write(self.settings_file, frontmatter.dumps(post) + "\n")
        logger.info("Saved setting %s", key)

    # ── Maintenance ───────────────────────────────────────────

    def cleanup_old_versions(self, keep: int = 50) -> int:
        """Keep only the most recent `keep` version files."""
        versions = sorted(
            (self.root / ".versions").glob("*"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        removed = 0
        for path in versions[keep:]:
            path.unlink()
            removed += 1
        return removed
