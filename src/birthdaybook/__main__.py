"""Entry point: python -m birthdaybook <command>

- list / categories:        show characters (card or list view, category filter)
- add / edit / delete:      manage characters
- import / export:          spreadsheet transfer (.xlsx or .csv)
- owner:                    show or set your own birthday
- check:                    run today's birthday check once
- serve:                    daemon mode, re-checks at every local midnight
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

from birthdaybook.clock import FixedClock
from birthdaybook.config import load_config
from birthdaybook.errors import BirthdayBookError
from birthdaybook.models import CharacterDraft
from birthdaybook.views import ALL_CATEGORIES, ViewMode, ViewState, render_lines


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="birthdaybook", description="Character birthday registry and reminders."
    )
    ap.add_argument("--config", type=Path, default=None, help="Path to birthdaybook.toml")
    ap.add_argument(
        "--today",
        default=None,
        help="Pretend today is this date (YYYY-MM-DD); useful for trying out reminders",
    )
    sub = ap.add_subparsers(dest="command")

    p = sub.add_parser("list", help="Show characters")
    p.add_argument("--category", default=ALL_CATEGORIES, help="Only this category (default: all)")
    p.add_argument("--list", dest="list_view", action="store_true", help="List view, sorted by birthday")

    sub.add_parser("categories", help="Show the distinct categories")

    for name in ("add", "edit"):
        p = sub.add_parser(name, help=f"{name.capitalize()} a character")
        if name == "edit":
            p.add_argument("id", help="Character id")
        required = name == "add"
        p.add_argument("--name", required=required)
        p.add_argument("--birthday", required=required, help="MM-DD or YYYY-MM-DD")
        p.add_argument("--source", default=None, help="Category")
        p.add_argument("--message", default=None, help="What this character says on your birthday")
        p.add_argument("--image", type=Path, default=None, help="Image file")

    p = sub.add_parser("delete", help="Delete a character")
    p.add_argument("id")

    p = sub.add_parser("import", help="Import characters from .xlsx or .csv")
    p.add_argument("path", type=Path)

    p = sub.add_parser("export", help="Export characters to .xlsx or .csv")
    p.add_argument("path", type=Path, nargs="?", default=Path("character_birthdays.xlsx"))

    p = sub.add_parser("owner", help="Show or set your own birthday")
    p.add_argument("birthday", nargs="?", default=None)

    sub.add_parser("check", help="Run today's birthday check")
    sub.add_parser("serve", help="Daemon mode")
    return ap


def _image_arg(path: Path | None) -> str | None:
    if path is None:
        return None
    from birthdaybook.images import to_data_url

    return to_data_url(path)


def _run(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    _setup_logging(config.log_level)

    from birthdaybook.core import BirthdayBook

    try:
        clock = FixedClock(date.fromisoformat(args.today)) if args.today else None
    except ValueError:
        raise SystemExit(f"Invalid --today value: {args.today}")
    book = BirthdayBook.from_config(config, clock=clock)
    cmd = args.command or "list"

    if cmd == "list":
        mode = ViewMode.LIST if getattr(args, "list_view", False) else ViewMode.CARD
        state = ViewState(category=getattr(args, "category", ALL_CATEGORIES), mode=mode)
        for line in render_lines(book.render(state)):
            print(line)

    elif cmd == "categories":
        for category in book.categories():
            print(category)

    elif cmd == "add":
        result = book.add_or_update(
            CharacterDraft(
                name=args.name,
                birthday=args.birthday,
                source=args.source or "",
                user_birthday_message=args.message or "",
                image=_image_arg(args.image),
            )
        )
        print(f"角色新增成功！ {result.record.name} ({result.record.id})")

    elif cmd == "edit":
        old = book.get(args.id)
        result = book.add_or_update(
            CharacterDraft(
                name=args.name if args.name is not None else old.name,
                birthday=args.birthday if args.birthday is not None else old.birthday,
                source=args.source if args.source is not None else old.source,
                user_birthday_message=(
                    args.message if args.message is not None else old.user_birthday_message
                ),
                image=_image_arg(args.image),
            ),
            record_id=args.id,
        )
        print(f"角色更新成功！ {result.record.name} ({result.record.id})")

    elif cmd == "delete":
        if not book.delete(args.id).changed:
            print(f"No character with id {args.id}", file=sys.stderr)
            return 1
        print(f"Deleted {args.id}")

    elif cmd == "import":
        result = book.import_file(args.path)
        print(result.report.summary())
        if result.report.is_empty_source or result.report.nothing_accepted:
            return 1

    elif cmd == "export":
        count = book.export_file(args.path)
        if not count:
            print("沒有資料可以匯出。", file=sys.stderr)
            return 1
        print(f"Exported {count} character(s) to {args.path}")

    elif cmd == "owner":
        if args.birthday:
            print(f"您的生日已儲存！ {book.save_owner_birthday(args.birthday)}")
        else:
            print(book.owner_birthday() or "尚未設定")

    elif cmd == "check":
        events = book.check_birthdays()
        if not events:
            print("No birthdays today.")

    elif cmd == "serve":
        from birthdaybook.daemon import BirthdayDaemon

        asyncio.run(BirthdayDaemon(config, book=book).run())

    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        return _run(args)
    except BirthdayBookError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
