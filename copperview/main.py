"""
copperview -- Amiga copper list, bitmap and palette inspector.

Main entry point.  Loads a debugger session snapshot and prints its copper
list, lists its graphics resources, exports a decoded bitmap or opens the
interactive viewer.

Usage examples::

    # Copper listing of the captured frame
    copperview session.json --copper

    # Bitmap and palette catalogs
    copperview session.json --list

    # Decode a bitmap resource with the live register palette
    copperview session.json --bitmap player --palette "*Custom Registers*" --png player.png

    # Browse everything in a window
    copperview session.json --view --scale 3
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from copperview.core.copper import format_copper_listing
from copperview.core.errors import CopperViewError
from copperview.shell.catalog import describe_view
from copperview.shell.session import DebugSession, current_session, load_session, set_current_session
from copperview.shell.surface import save_png

DEFAULT_SCALE: int = 2


# ---------------------------------------------------------------------------
# CLI definition
# ---------------------------------------------------------------------------

def _parse_color(text: str) -> int:
    try:
        return int(text.lstrip("#$"), 16) & 0xFFFFFF
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a RRGGBB colour: {text!r}") from None


def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser."""
    parser = argparse.ArgumentParser(
        prog="copperview",
        description=(
            "copperview -- inspect the copper list, bitmaps and palettes of "
            "a captured Amiga frame."
        ),
    )

    parser.add_argument(
        "session",
        help="Path to a JSON session snapshot.",
    )

    parser.add_argument(
        "--list", "-l",
        action="store_true",
        default=False,
        help="Print the bitmap and palette catalogs.",
    )
    parser.add_argument(
        "--copper", "-c",
        action="store_true",
        default=False,
        help="Print the decoded copper list.",
    )

    # Selection
    parser.add_argument(
        "--bitmap", "-b",
        default=None,
        metavar="NAME",
        help="Bitmap to decode.  Default: the copper playfield.",
    )
    parser.add_argument(
        "--palette", "-p",
        default=None,
        metavar="NAME",
        help="Palette to decode with.  Default: the copper palette.",
    )

    # Output
    parser.add_argument(
        "--png",
        default=None,
        metavar="PATH",
        help="Write the decoded bitmap to an image file.",
    )
    parser.add_argument(
        "--scale", "-s",
        type=int,
        default=DEFAULT_SCALE,
        help=f"Zoom factor (1-8).  Default: {DEFAULT_SCALE}.",
    )
    parser.add_argument(
        "--background",
        type=_parse_color,
        default=None,
        metavar="RRGGBB",
        help="Colour for transparent pixels in exported images.  Default: keep alpha.",
    )
    parser.add_argument(
        "--after-dma",
        action="store_true",
        default=False,
        help="Decode from chip memory with the frame's recorded bus writes applied.",
    )
    parser.add_argument(
        "--view",
        action="store_true",
        default=False,
        help="Open the interactive viewer window.",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG).",
    )

    return parser


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _configure_logging(verbosity: int) -> None:
    """Set up the root logger based on requested verbosity."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _print_catalogs(session: DebugSession) -> None:
    print("Bitmaps")
    print("=" * 40)
    for view in session.bitmap_views():
        print(f"  {describe_view(view)}")
    print()
    print("Palettes")
    print("=" * 40)
    for view in session.palette_views():
        print(f"  {describe_view(view)}")


def _print_copper(session: DebugSession) -> None:
    program = session.copper_program()
    listing = format_copper_listing(program.entries)
    if listing:
        print(listing)
    if program.truncated is not None:
        print(f"; truncated: {program.truncated}")


def _export(session: DebugSession, args: argparse.Namespace) -> None:
    bitmap = DebugSession.find(session.bitmap_views(), args.bitmap)
    palette = DebugSession.find(session.palette_views(), args.palette)
    raster = session.render(bitmap, palette.palette)
    save_png(raster, args.png, args.scale, args.background)
    print(f"Wrote {args.png} ({bitmap.name} with {palette.name})")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` to use ``sys.argv``.

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    logger = logging.getLogger("copperview.main")

    session_path: str = os.path.expanduser(args.session)
    if not os.path.isfile(session_path):
        print(f"Error: session file not found: {session_path}", file=sys.stderr)
        return 1

    try:
        set_current_session(load_session(session_path))
    except CopperViewError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    session = current_session()
    if args.after_dma:
        session = session.after_dma()
        set_current_session(session)

    try:
        if args.list:
            _print_catalogs(session)
        if args.copper:
            _print_copper(session)
        if args.png:
            _export(session, args)
    except KeyError as exc:
        print(f"Error: no such resource: {exc.args[0]}", file=sys.stderr)
        return 1
    except (CopperViewError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.view:
        from copperview.platform.viewer import Viewer

        logger.info("Opening viewer ...")
        try:
            Viewer(session, args.scale, bitmap=args.bitmap, palette=args.palette).run()
        except KeyError as exc:
            print(f"Error: no such resource: {exc.args[0]}", file=sys.stderr)
            return 1
        except Exception as exc:
            logger.exception("Fatal error in viewer")
            print(f"Fatal error: {exc}", file=sys.stderr)
            return 1

    if not (args.list or args.copper or args.png or args.view):
        _print_copper(session)

    return 0


if __name__ == "__main__":
    sys.exit(main())
