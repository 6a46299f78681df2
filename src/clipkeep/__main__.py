import argparse
import logging
import sys

from clipkeep.config import LOG_PATH, PREVIEW_LENGTH
from clipkeep.history import order_entries
from clipkeep.storage import StorageManager
from clipkeep.utils import ensure_dirs, truncate_text


def list_history(storage: StorageManager | None = None) -> int:
    """Print the saved history in display order."""
    storage = storage or StorageManager()
    entries = order_entries(reversed(storage.load()))
    if not entries:
        print("(No clipboard history)")
        return 0
    for entry in entries:
        marker = "*" if entry.pinned else " "
        preview = truncate_text(entry.primary_text, PREVIEW_LENGTH)
        print(f"{marker} {entry.id[:8]}  {entry.timestamp:%Y-%m-%d %H:%M:%S}  {preview}")
    return 0


def clear_history(storage: StorageManager | None = None) -> int:
    """Empty the saved history file."""
    storage = storage or StorageManager()
    if not storage.save([]):
        print(f"Failed to clear history at {storage.path}")
        return 1
    print("Clipboard history cleared.")
    return 0


def run_app():
    """Run the ClipKeep menu bar application."""
    ensure_dirs()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(LOG_PATH),
            logging.StreamHandler(sys.stderr),
        ],
    )

    from clipkeep.app import ClipKeepApp

    app = ClipKeepApp()
    app.run()


def main():
    parser = argparse.ArgumentParser(
        description="ClipKeep - Clipboard history manager for macOS",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  (none), run  Run ClipKeep in the menu bar
  list         Print saved clipboard history
  clear        Delete all saved clipboard history

Examples:
  clipkeep          # Start monitoring the clipboard
  clipkeep list     # Show what has been captured
""",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=["run", "list", "clear"],
        help="Command to run",
    )

    args = parser.parse_args()

    if args.command == "list":
        sys.exit(list_history())
    elif args.command == "clear":
        sys.exit(clear_history())
    else:
        run_app()


if __name__ == "__main__":
    main()
