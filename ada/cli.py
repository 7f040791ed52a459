"""
Command line interface
Runs the share, classify and action flows against the local JSON backend
"""
import argparse
import asyncio
import json
import sys
from typing import List, Optional, Sequence

from loguru import logger

from ada.backend import JsonBackend
from ada.config import Settings, get_settings
from ada.errors import AdaError
from ada.models import ActionStatus, Category, ContentType, ItemStatus
from ada.patterns import get_category_def
from ada.platform import LocalCalendar, LocalNotifications
from ada.services.actions import ActionExecutor
from ada.services.classifier import classify_heuristic
from ada.services.share_handler import ShareInput, process_shared_content
from ada.stores import Session
from ada.utils import setup_logger
from ada.utils.format import capitalize, clean_url, confidence_label, time_ago, truncate

ID_WIDTH = 8
TITLE_WIDTH = 48


class App:
    """Wires the local collaborators together for one CLI invocation"""

    def __init__(self, settings: Settings, user_id: str, deny_permissions: bool = False):
        grant = not deny_permissions
        self.settings = settings
        self.user_id = user_id
        self.backend = JsonBackend(settings)
        self.calendar = LocalCalendar(settings.data_dir, grant_permission=grant)
        self.notifications = LocalNotifications(settings.data_dir, grant_permission=grant)
        self.executor = ActionExecutor(self.backend, self.calendar, self.notifications, settings)
        self.session = Session(self.backend, self.executor, settings.page_limit)

    async def open(self) -> Session:
        await self.session.sign_in(self.user_id)
        return self.session

    async def close(self) -> None:
        await self.backend.drain()
        if self.session.signed_in:
            self.session.sign_out()


def _resolve(records, record_id: str, kind: str):
    matches = [record for record in records if record.id == record_id or record.id.startswith(record_id)]
    if not matches:
        raise SystemExit(f"No {kind} found with id '{record_id}'.")
    if len(matches) > 1:
        ids = [record.id for record in matches]
        raise SystemExit(f"Multiple {kind}s match '{record_id}': {ids}")
    return matches[0]


def _format_item(item) -> str:
    category = get_category_def(item.category.value if item.category else None)
    title = item.title or (clean_url(item.raw_content) if item.type == ContentType.LINK else item.raw_content)
    star = "*" if item.is_starred else " "
    confidence = confidence_label(item.confidence)
    return (
        f"{star} {item.id[:ID_WIDTH]}  {item.status.value:<10}  {category.label:<16}  "
        f"{confidence:<6}  {time_ago(item.created_at):>8}  {truncate(title, TITLE_WIDTH)}"
    )


def _format_action(action) -> str:
    return (
        f"{action.id[:ID_WIDTH]}  {action.status.value:<9}  {action.label:<16}  "
        f"item {action.item_id[:ID_WIDTH]}  {time_ago(action.created_at):>8}"
    )


def _print_lines(lines: List[str], empty: str) -> None:
    if not lines:
        print(empty)
        return
    for line in lines:
        print(line)


async def cmd_share(app: App, args) -> None:
    share = ShareInput(
        text=args.text,
        url=args.url,
        image_uri=args.image,
        source_app=args.source_app,
        user_input=args.note,
    )
    result = await process_shared_content(app.backend, app.user_id, share, app.settings)
    hint = result.heuristic_hint
    print(f"Saved {result.item.id} ({result.item.type.value})")
    print(f"Hint: {get_category_def(hint.category.value).label} ({confidence_label(hint.confidence)})")

    if args.no_wait:
        return

    await app.backend.drain()
    item = await app.backend.get_item_by_id(result.item.id)
    if item is not None and item.category is not None:
        print(f"Classified: {get_category_def(item.category.value).label} - {item.title or ''}")
        for action in await app.backend.get_actions_for_item(item.id):
            print(f"  suggested {action.id[:ID_WIDTH]}  {action.label}")


async def cmd_items(app: App, args) -> None:
    session = await app.open()
    store = session.items
    if args.search:
        items = store.search(args.search)
    elif args.starred:
        items = store.starred()
    elif args.category:
        items = store.by_category(Category(args.category))
    elif args.status:
        items = store.by_status(ItemStatus(args.status))
    else:
        items = store.items
    _print_lines([_format_item(item) for item in items], "No items.")


async def cmd_actions(app: App, args) -> None:
    session = await app.open()
    store = session.actions
    if args.item:
        item = _resolve(session.items.items, args.item, "item")
        actions = store.for_item(item.id)
    elif args.pending:
        actions = store.pending()
    elif args.completed:
        actions = store.completed()
    else:
        actions = store.actions
    _print_lines([_format_action(action) for action in actions], "No actions.")


async def cmd_execute(app: App, args) -> None:
    session = await app.open()
    action = _resolve(session.actions.actions, args.action_id, "action")
    try:
        result = await session.actions.execute_and_update(action)
    except AdaError as e:
        raise SystemExit(f"{action.label} failed: {e.message}")
    print(f"{action.label}: {json.dumps(result)}")


async def cmd_dismiss(app: App, args) -> None:
    session = await app.open()
    action = _resolve(session.actions.actions, args.action_id, "action")
    await session.actions.dismiss_action(action.id)
    _exit_on_error(session.actions.error)
    print(f"Dismissed {action.label}.")


async def cmd_archive(app: App, args) -> None:
    session = await app.open()
    item = _resolve(session.items.items, args.item_id, "item")
    await session.items.archive_item(item.id)
    _exit_on_error(session.items.error)
    print(f"Archived {item.id}.")


async def cmd_delete(app: App, args) -> None:
    session = await app.open()
    item = _resolve(session.items.items, args.item_id, "item")
    await session.items.delete_item(item.id)
    _exit_on_error(session.items.error)
    print(f"Deleted {item.id}.")


async def cmd_star(app: App, args) -> None:
    session = await app.open()
    item = _resolve(session.items.items, args.item_id, "item")
    await session.items.toggle_star(item.id)
    _exit_on_error(session.items.error)
    starred = session.items.get(item.id).is_starred
    print(f"{'Starred' if starred else 'Unstarred'} {item.id}.")


async def cmd_note(app: App, args) -> None:
    session = await app.open()
    item = _resolve(session.items.items, args.item_id, "item")
    note = None if args.clear else " ".join(args.text)
    await session.items.update_note(item.id, note)
    _exit_on_error(session.items.error)
    print(f"Note {'cleared' if note is None else 'saved'} for {item.id}.")


async def cmd_reclassify(app: App, args) -> None:
    session = await app.open()
    item = _resolve(session.items.items, args.item_id, "item")
    try:
        await session.items.reclassify(item.id)
    except AdaError as e:
        raise SystemExit(f"Reclassify failed: {e.message}")
    await app.backend.drain()
    updated = await app.backend.get_item_by_id(item.id)
    category = updated.category.value if updated and updated.category else None
    print(f"Reclassified {item.id}: {capitalize(get_category_def(category).label)}")


async def cmd_classify(app: App, args) -> None:
    result = classify_heuristic(" ".join(args.content), ContentType(args.type), currency=app.settings.default_currency)
    print(json.dumps(result.to_payload(), indent=2, ensure_ascii=False))


def _exit_on_error(error: Optional[str]) -> None:
    if error:
        raise SystemExit(error)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ada", description="Ada - classify shared content and act on it")
    parser.add_argument("--user", default="local", help="User id that owns the items (default: local)")
    parser.add_argument(
        "--deny-permissions",
        action="store_true",
        help="Simulate a user refusing calendar and notification access",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    share_cmd = sub.add_parser("share", help="Share content and classify it")
    source = share_cmd.add_mutually_exclusive_group(required=True)
    source.add_argument("--url", help="Shared link")
    source.add_argument("--text", help="Shared text")
    source.add_argument("--image", help="Path of a shared image")
    share_cmd.add_argument("--source-app", help="App the content came from")
    share_cmd.add_argument("--note", help="Your own note about the content")
    share_cmd.add_argument("--no-wait", action="store_true", help="Do not wait for classification")
    share_cmd.set_defaults(func=cmd_share)

    items_cmd = sub.add_parser("items", help="List items")
    items_cmd.add_argument("--status", choices=[status.value for status in ItemStatus])
    items_cmd.add_argument("--category", choices=[category.value for category in Category])
    items_cmd.add_argument("--starred", action="store_true")
    items_cmd.add_argument("--search", help="Case-insensitive text search")
    items_cmd.set_defaults(func=cmd_items)

    actions_cmd = sub.add_parser("actions", help="List actions")
    actions_cmd.add_argument("--item", help="Only actions of this item (id or prefix)")
    view = actions_cmd.add_mutually_exclusive_group()
    view.add_argument("--pending", action="store_true")
    view.add_argument("--completed", action="store_true")
    actions_cmd.set_defaults(func=cmd_actions)

    execute_cmd = sub.add_parser("execute", help="Approve and execute an action")
    execute_cmd.add_argument("action_id", help="Action id or prefix")
    execute_cmd.set_defaults(func=cmd_execute)

    dismiss_cmd = sub.add_parser("dismiss", help="Dismiss a suggested action")
    dismiss_cmd.add_argument("action_id", help="Action id or prefix")
    dismiss_cmd.set_defaults(func=cmd_dismiss)

    for name, func, help_text in (
        ("archive", cmd_archive, "Archive an item"),
        ("delete", cmd_delete, "Delete an item and its actions"),
        ("star", cmd_star, "Toggle an item's star"),
        ("reclassify", cmd_reclassify, "Reset an item to pending and classify it again"),
    ):
        item_cmd = sub.add_parser(name, help=help_text)
        item_cmd.add_argument("item_id", help="Item id or prefix")
        item_cmd.set_defaults(func=func)

    note_cmd = sub.add_parser("note", help="Set or clear an item's note")
    note_cmd.add_argument("item_id", help="Item id or prefix")
    note_cmd.add_argument("text", nargs="*", help="Note text")
    note_cmd.add_argument("--clear", action="store_true", help="Remove the note")
    note_cmd.set_defaults(func=cmd_note)

    classify_cmd = sub.add_parser("classify", help="Dry-run the heuristic classifier")
    classify_cmd.add_argument("content", nargs="+", help="Content to classify")
    classify_cmd.add_argument(
        "--type",
        default=ContentType.TEXT.value,
        choices=[content_type.value for content_type in ContentType],
    )
    classify_cmd.set_defaults(func=cmd_classify)

    return parser


async def _run(app: App, args) -> None:
    try:
        await args.func(app, args)
    finally:
        await app.close()


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        setup_logger()
        logger.error(f"Configuration error: {e}")
        sys.exit(2)

    setup_logger(settings.log_level, settings.log_file or None)

    if args.command == "note" and not args.clear and not args.text:
        raise SystemExit("Provide note text or --clear.")

    app = App(settings, args.user, deny_permissions=args.deny_permissions)
    try:
        asyncio.run(_run(app, args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except AdaError as e:
        logger.error(f"{type(e).__name__}: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
