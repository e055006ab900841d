"""Tests for spreadsheet import/export."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from birthdaybook.errors import ValidationError
from birthdaybook.models import EXPORT_COLUMNS, CharacterDraft
from birthdaybook.store import CharacterStore
from birthdaybook.transfer import codec
from birthdaybook.transfer.exporter import export_file, to_export_rows
from birthdaybook.transfer.importer import draft_from_row, import_rows, reconcile


def _row(**overrides):
    row = {"name": "Alice", "birthday": "06-15", "source": "Anime", "userBirthdayMessage": "HBD!"}
    row.update(overrides)
    return row


class TestDraftFromRow:
    def test_valid(self):
        draft = draft_from_row(_row())
        assert draft == CharacterDraft(
            name="Alice", birthday="06-15", source="Anime", user_birthday_message="HBD!", image=""
        )

    def test_single_digit_is_padded(self):
        assert draft_from_row(_row(birthday="5-5")).birthday == "05-05"

    @pytest.mark.parametrize("birthday", ["May 5", "13-40", "2000-05-05", "05/05", ""])
    def test_bad_birthday_rejected(self, birthday):
        with pytest.raises(ValidationError):
            draft_from_row(_row(birthday=birthday))

    @pytest.mark.parametrize("column", ["name", "birthday", "userBirthdayMessage"])
    def test_required_columns(self, column):
        with pytest.raises(ValidationError) as exc:
            draft_from_row(_row(**{column: ""}))
        assert exc.value.field == column
        row = _row()
        del row[column]
        with pytest.raises(ValidationError):
            draft_from_row(row)

    def test_source_defaults_and_trims(self):
        row = _row()
        del row["source"]
        assert draft_from_row(row).source == ""
        assert draft_from_row(_row(source="  Games ")).source == "Games"
        assert draft_from_row(_row(source=42)).source == "42"

    def test_date_cell(self):
        assert draft_from_row(_row(birthday=datetime(2001, 3, 9))).birthday == "03-09"

    def test_image_never_imported(self):
        assert draft_from_row(_row(image="data:image/png;base64,AAAA")).image == ""


class TestReconcile:
    def test_bad_rows_do_not_block_good_ones(self):
        plan = reconcile([_row(name="A"), _row(birthday="May 5"), _row(name="C"), _row(name="")])
        assert [d.name for d in plan.accepted] == ["A", "C"]
        assert [r.index for r in plan.rejected] == [2, 4]
        assert plan.total == 4


class TestImportRows:
    def test_accepted_are_stored(self, store: CharacterStore):
        report = import_rows(store, [_row(name="A", birthday="5-5"), _row(name="B", birthday="x")])
        assert report.accepted == 1
        assert len(report.rejected) == 1
        assert report.total == 2
        assert [c.birthday for c in store.list()] == ["05-05"]
        assert "Imported 1 of 2" in report.summary()

    def test_empty_source(self, store: CharacterStore):
        report = import_rows(store, [])
        assert report.is_empty_source
        assert not report.nothing_accepted

    def test_nothing_accepted(self, store: CharacterStore):
        report = import_rows(store, [_row(birthday="May 5")])
        assert report.nothing_accepted
        assert not report.is_empty_source
        assert store.list() == []


class TestExport:
    def test_rows_exclude_id_and_image(self, store: CharacterStore):
        store.create(CharacterDraft(name="A", birthday="01-05", image="data:image/png;base64,AAAA"))
        rows = to_export_rows(store.list())
        assert rows == [{"name": "A", "birthday": "01-05", "source": "", "userBirthdayMessage": ""}]
        assert list(rows[0]) == list(EXPORT_COLUMNS)

    def test_empty_writes_nothing(self, tmp_path: Path):
        out = tmp_path / "out.xlsx"
        assert export_file([], out) == 0
        assert not out.exists()

    def test_xlsx_layout(self, store: CharacterStore, tmp_path: Path):
        store.create(CharacterDraft(name="A", birthday="01-05", source="S", user_birthday_message="m"))
        out = tmp_path / "out.xlsx"
        assert export_file(store.list(), out) == 1
        wb = load_workbook(out)
        ws = wb.worksheets[0]
        assert ws.title == codec.SHEET_TITLE
        values = list(ws.iter_rows(values_only=True))
        assert values[0] == EXPORT_COLUMNS
        assert values[1] == ("A", "01-05", "S", "m")


class TestRoundTrip:
    def _populate(self, store: CharacterStore) -> None:
        for name, birthday, source, message in [
            ("Alice", "01-05", "Anime", "Happy birthday!"),
            ("Bob", "03-10", "", "Cheers"),
            ("Carol", "12-31", "Games", "🎉"),
        ]:
            store.create(
                CharacterDraft(
                    name=name,
                    birthday=birthday,
                    source=source,
                    user_birthday_message=message,
                    image="data:image/png;base64,AAAA",
                )
            )

    @staticmethod
    def _tuples(store: CharacterStore) -> set[tuple]:
        return {(c.name, c.birthday, c.source, c.user_birthday_message) for c in store.list()}

    def test_rows(self, store: CharacterStore, tmp_path: Path):
        self._populate(store)
        fresh = CharacterStore(tmp_path / "fresh")
        report = import_rows(fresh, to_export_rows(store.list()))
        assert report.accepted == 3
        assert self._tuples(fresh) == self._tuples(store)

    @pytest.mark.parametrize("suffix", [".xlsx", ".csv"])
    def test_files(self, store: CharacterStore, tmp_path: Path, suffix: str):
        self._populate(store)
        out = tmp_path / f"export{suffix}"
        export_file(store.list(), out)
        fresh = CharacterStore(tmp_path / "fresh")
        import_rows(fresh, codec.read_rows(out))
        assert self._tuples(fresh) == self._tuples(store)
        assert all(c.image == "" for c in fresh.list())


class TestCodec:
    def test_unsupported_suffix(self, tmp_path: Path):
        with pytest.raises(ValidationError):
            codec.read_rows(tmp_path / "data.json")

    def test_xlsx_skips_blank_rows(self, tmp_path: Path):
        wb = Workbook()
        ws = wb.active
        ws.append(["name", "birthday", "userBirthdayMessage"])
        ws.append(["A", "5-5", "hi"])
        ws.append([None, None, None])
        ws.append(["B", 7, "yo"])
        path = tmp_path / "in.xlsx"
        wb.save(path)
        rows = codec.read_rows(path)
        assert rows == [
            {"name": "A", "birthday": "5-5", "userBirthdayMessage": "hi"},
            {"name": "B", "birthday": 7, "userBirthdayMessage": "yo"},
        ]

    def test_empty_xlsx(self, tmp_path: Path):
        path = tmp_path / "empty.xlsx"
        Workbook().save(path)
        assert codec.read_rows(path) == []

    def test_csv_header_whitespace(self, tmp_path: Path, store: CharacterStore):
        path = tmp_path / "in.csv"
        path.write_text(
            "name, birthday, source, userBirthdayMessage\nAlice, 5-5, Anime,hi\n", encoding="utf-8"
        )
        rows = codec.read_rows(path)
        assert set(rows[0]) == set(EXPORT_COLUMNS)
        report = import_rows(store, rows)
        assert report.accepted == 1
        assert store.list()[0].birthday == "05-05"
