"""CLI entry point for navpage."""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from navpage.app.config import get_settings
from navpage.app.logging import setup_logging
from navpage.app.paths import ensure_dirs
from navpage.bookmarks.errors import BookmarkError
from navpage.bookmarks.models import Bookmark
from navpage.bookmarks.store import BookmarkStore
from navpage.client.upload import IconUploadClient, UploadClientError
from navpage.storage.kv import open_store

logger = logging.getLogger("navpage.cli")


def _open_bookmarks() -> BookmarkStore:
    store = BookmarkStore(open_store(get_settings()))
    store.load()
    return store


def _print_bookmark(bookmark: Bookmark) -> None:
    print(f"  [{bookmark.accent:<7}] {bookmark.name}")
    print(f"            {bookmark.url}")
    print(f"            id={bookmark.id}  icon={bookmark.display_icon or '-'}")


def _resolve_icon(args, current: Optional[str] = None) -> Optional[str]:
    """Icon URL from --icon / --icon-file, uploading the file if given."""
    if getattr(args, "icon_file", None):
        return IconUploadClient.from_settings().upload(Path(args.icon_file))
    if getattr(args, "icon", None) is not None:
        return args.icon
    return current


def _discard_upload(args, icon: Optional[str]) -> None:
    """Best-effort cleanup of an icon uploaded for a rejected bookmark."""
    if not getattr(args, "icon_file", None) or not icon:
        return
    try:
        IconUploadClient.from_settings().delete(icon)
    except UploadClientError as e:
        logger.warning("Could not delete orphaned icon %s: %s", icon, e.message)


def cmd_list(args):
    """List all bookmarks."""
    store = _open_bookmarks()
    if not store.bookmarks:
        print("No bookmarks yet.")
        return 0
    for bookmark in store.bookmarks:
        _print_bookmark(bookmark)
    return 0


def cmd_search(args):
    """Filter bookmarks by name or address."""
    store = _open_bookmarks()
    results = store.filter(args.term)
    if not results:
        print("No results found.")
        return 0
    for bookmark in results:
        _print_bookmark(bookmark)
    return 0


def cmd_add(args):
    store = _open_bookmarks()
    try:
        icon = _resolve_icon(args)
    except UploadClientError as e:
        print(f"Icon upload failed: {e.message}", file=sys.stderr)
        return 1
    try:
        bookmark = store.add(args.name, args.url, icon=icon)
    except BookmarkError as e:
        _discard_upload(args, icon)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Added {bookmark.name} ({bookmark.url}) id={bookmark.id}")
    return 0


def cmd_edit(args):
    store = _open_bookmarks()
    current = store.get(args.id)
    try:
        icon = _resolve_icon(args, current.icon if current else None)
    except UploadClientError as e:
        print(f"Icon upload failed: {e.message}", file=sys.stderr)
        return 1
    try:
        bookmark = store.update(args.id, args.name, args.url, icon=icon)
    except BookmarkError as e:
        _discard_upload(args, icon)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Updated {bookmark.name} ({bookmark.url})")
    return 0


def cmd_rm(args):
    store = _open_bookmarks()
    removed = store.remove(args.id)
    if removed is None:
        print(f"No bookmark with id {args.id}; nothing removed.")
        return 0
    print(f"Removed {removed.name}")
    if args.delete_icon and removed.icon:
        try:
            IconUploadClient.from_settings().delete(removed.icon)
        except UploadClientError as e:
            print(f"Icon delete failed: {e.message}", file=sys.stderr)
            return 1
    return 0


def cmd_theme(args):
    """Show or toggle dark mode."""
    store = _open_bookmarks()
    dark = store.toggle_theme() if args.toggle else store.dark_mode
    print(f"Dark mode: {'on' if dark else 'off'}")
    return 0


def cmd_upload(args):
    """Upload an icon through the proxy and print its URL."""
    try:
        url = IconUploadClient.from_settings().upload(Path(args.path))
    except UploadClientError as e:
        print(f"Icon upload failed: {e.message}", file=sys.stderr)
        return 1
    print(url)
    return 0


def cmd_serve(args):
    """Start the upload proxy."""
    import uvicorn
    from navpage.web.server import app

    settings = get_settings()
    port = args.port or settings.web_port
    host = settings.web_host

    print(f"Starting server at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="navpage",
        description="navpage: personal navigation page bookmarks",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # list
    p_list = subparsers.add_parser("list", help="List bookmarks")
    p_list.set_defaults(func=cmd_list)

    # search
    p_search = subparsers.add_parser("search", help="Filter bookmarks")
    p_search.add_argument("term")
    p_search.set_defaults(func=cmd_search)

    # add
    p_add = subparsers.add_parser("add", help="Add a bookmark")
    p_add.add_argument("name")
    p_add.add_argument("url")
    icon_group = p_add.add_mutually_exclusive_group()
    icon_group.add_argument("--icon", default=None, help="Icon URL")
    icon_group.add_argument("--icon-file", default=None, help="Image to upload as icon")
    p_add.set_defaults(func=cmd_add)

    # edit
    p_edit = subparsers.add_parser("edit", help="Edit a bookmark")
    p_edit.add_argument("id")
    p_edit.add_argument("name")
    p_edit.add_argument("url")
    icon_group = p_edit.add_mutually_exclusive_group()
    icon_group.add_argument("--icon", default=None, help="Icon URL (empty string clears it)")
    icon_group.add_argument("--icon-file", default=None, help="Image to upload as icon")
    p_edit.set_defaults(func=cmd_edit)

    # rm
    p_rm = subparsers.add_parser("rm", help="Remove a bookmark")
    p_rm.add_argument("id")
    p_rm.add_argument("--delete-icon", action="store_true", help="Also delete its uploaded icon")
    p_rm.set_defaults(func=cmd_rm)

    # theme
    p_theme = subparsers.add_parser("theme", help="Show or toggle dark mode")
    p_theme.add_argument("--toggle", action="store_true")
    p_theme.set_defaults(func=cmd_theme)

    # upload
    p_upload = subparsers.add_parser("upload", help="Upload an icon image")
    p_upload.add_argument("path")
    p_upload.set_defaults(func=cmd_upload)

    # serve
    p_serve = subparsers.add_parser("serve", help="Start the upload proxy")
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    setup_logging()
    ensure_dirs()

    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
