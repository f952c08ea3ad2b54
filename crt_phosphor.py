#!/usr/bin/env python3
from __future__ import annotations
import argparse
import logging
import os
import sys
import time
from typing import List, Optional

from colors import parse_color
from errors import CrtError, InvalidConfiguration, install_global_exception_hooks, safe_slot
from logconf import setup_logging
from pipeline import process_image, process_many
from presets import CrtSettings, RESAMPLE_FILTERS
from watcher import DEFAULT_SETTLE, FolderWatcher, list_images

logger = logging.getLogger("crt_phosphor")


def _color_arg(text: str):
    try:
        return parse_color(text)
    except InvalidConfiguration as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _add_common(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("-v", "--verbose", action="store_true", help="debug output on stderr")
    ap.add_argument("--log-dir", default="logs", help="directory for app.log and crash dumps")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="crt-phosphor",
        description="Render a CRT phosphor mask and scanlines over an image; writes <directory>/<stem>.png.",
    )
    ap.add_argument("-i", "--image", required=True, help="source image")
    ap.add_argument("-d", "--directory", required=True, help="output directory")
    ap.add_argument("-u", "--upsampling", type=int, default=2, help="integer upscale before masking (default 2)")
    ap.add_argument("-p", "--pixel", type=int, required=True, help="phosphor cell edge in upsampled pixels")
    ap.add_argument("-s", "--scanlines", type=int, required=True, help="number of scanline bands over the height")
    ap.add_argument("-b", "--brightness", type=int, required=True, help="additive brightness offset")
    ap.add_argument("-c", "--contrast", type=float, required=True, help="contrast adjustment (0 = unchanged)")
    ap.add_argument("--red", type=_color_arg, default=(255, 0, 0), help="red stripe tint (#RRGGBB or r,g,b)")
    ap.add_argument("--green", type=_color_arg, default=(0, 255, 0), help="green stripe tint")
    ap.add_argument("--blue", type=_color_arg, default=(0, 0, 255), help="blue stripe tint")
    ap.add_argument("--filter", default="catmull-rom", choices=RESAMPLE_FILTERS, help="resampling filter")
    ap.add_argument("--workers", type=int, default=1, help="threads for the mask and scanline stages")
    ap.add_argument("--save-preset", metavar="FILE", help="also write the effective settings as JSON")
    _add_common(ap)
    return ap


def settings_from_args(args: argparse.Namespace) -> CrtSettings:
    return CrtSettings(
        pixel_size=args.pixel,
        scanlines=args.scanlines,
        brightness=args.brightness,
        contrast=args.contrast,
        upsampling=args.upsampling,
        red_repr=args.red,
        green_repr=args.green,
        blue_repr=args.blue,
        resample_filter=args.filter,
        workers=args.workers,
    ).validate()


def execute(args: argparse.Namespace) -> int:
    try:
        settings = settings_from_args(args)
        if args.save_preset:
            settings.save(args.save_preset)
            logger.info("Saved preset: %s", args.save_preset)
        process_image(args.image, args.directory, settings)
    except CrtError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    return 0


def run(argv: Optional[List[str]] = None) -> int:
    return execute(build_parser().parse_args(argv))


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_dir=args.log_dir)
    install_global_exception_hooks(args.log_dir or None)
    sys.exit(execute(args))


# ---------- watch mode ----------
def build_watch_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="crt-phosphor-watch",
        description="Watch a folder and render every new image with the settings from a preset.",
    )
    ap.add_argument("--watch", required=True, help="folder to watch")
    ap.add_argument("-d", "--directory", required=True, help="output directory (must differ from --watch)")
    ap.add_argument("--preset", required=True, help="JSON preset written by --save-preset")
    ap.add_argument("--process-existing", action="store_true", help="render images already in the folder first")
    ap.add_argument("--jobs", type=int, default=1, help="files rendered in parallel")
    ap.add_argument(
        "--settle", type=float, default=DEFAULT_SETTLE,
        help="seconds a new file must stay unchanged before it is rendered (default %(default)s)",
    )
    _add_common(ap)
    return ap


def watch(args: argparse.Namespace, stop_after: Optional[float] = None) -> int:
    try:
        settings = CrtSettings.load(args.preset)
        if not os.path.isdir(args.watch):
            raise InvalidConfiguration(f"not a directory: {args.watch}")
        if os.path.abspath(args.watch) == os.path.abspath(args.directory):
            raise InvalidConfiguration("output directory must differ from the watched folder")
        if args.settle < 0:
            raise InvalidConfiguration(f"settle time must be >= 0, got {args.settle}")
        existing = list_images(args.watch) if args.process_existing else []
        if existing:
            process_many(existing, args.directory, settings, workers=args.jobs)
    except CrtError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1

    @safe_slot
    def on_new(paths: List[str]) -> None:
        process_many(paths, args.directory, settings, workers=args.jobs)

    fw = FolderWatcher(on_new, settle=args.settle)
    fw.mark_done(existing)
    fw.start(args.watch)
    started = time.monotonic()
    try:
        while stop_after is None or time.monotonic() - started < stop_after:
            time.sleep(0.1)
            fw.poll()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        fw.stop()
    return 0


def watch_main(argv: Optional[List[str]] = None) -> None:
    args = build_watch_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_dir=args.log_dir)
    install_global_exception_hooks(args.log_dir or None)
    sys.exit(watch(args))


if __name__ == "__main__":
    main()
