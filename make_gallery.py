# -*- coding: utf-8 -*-
import argparse
import logging
import os
import sys

from imagegallery.gallery import (
    build_gallery,
    setup_logging as setup_gallery_logging,
    GalleryConfig,
    GallerySetupError,
    DEFAULT_OUTPUT_DIR,
    STATUS_NO_IMAGES,
    STATUS_ALL_FAILED,
)
from imagegallery.thumbnail import (
    setup_logging as setup_thumbnail_logging,
    FILTER_NAMES,
    THUMB_WIDTH,
    THUMB_QUALITY,
)
from imagegallery.external import (
    setup_logging as setup_external_logging,
    EXTERNAL_TOOL_NAMES,
)
from imagegallery.render import DEFAULT_TITLE

__version__ = "1.0.0"


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="make-gallery",
        description="Static Image Gallery Generator",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    parser.add_argument("source_dir", help="Directory containing the images to publish.")
    parser.add_argument("title", nargs='?', default=DEFAULT_TITLE,
                        help=f"Gallery title (default: '{DEFAULT_TITLE}').")

    parser.add_argument("-o", "--output-dir", dest='output_dir', default=DEFAULT_OUTPUT_DIR,
                        help=f"Where to write the gallery (default: '{DEFAULT_OUTPUT_DIR}' in current directory).")

    thumb_group = parser.add_argument_group('Thumbnail Options')
    thumb_group.add_argument("--external-thumbs", dest='external', action='store_true', default=False,
                             help="Create thumbnails with external tools, tried in order:\n" +
                                  "\n".join([f"  {k}: {v}" for k, v in EXTERNAL_TOOL_NAMES.items()]) +
                                  "\nAlso accepts .gif and .webp sources.")
    thumb_group.add_argument("-w", "--width", type=int, default=THUMB_WIDTH,
                             help=f"Maximum thumbnail width in pixels (default: {THUMB_WIDTH}).\n"
                                  "With --external-thumbs this is the bounding box size.")
    thumb_group.add_argument("--filter",
                             default='lanczos',
                             choices=FILTER_NAMES.keys(),
                             help="Resampling filter for Pillow thumbnails (default: lanczos):\n" +
                                  "\n".join([f"  {k}: {v}" for k, v in FILTER_NAMES.items()]))
    thumb_group.add_argument("-q", "--quality", type=int, default=THUMB_QUALITY,
                             help=f"JPG/WEBP thumbnail quality (1-100, default: {THUMB_QUALITY}).")

    optional_group = parser.add_argument_group('Other Options')
    optional_group.add_argument("-j", "--workers", type=int, default=1,
                                help="Number of worker processes (default: 1).")
    optional_group.add_argument("--overwrite", action='store_true', default=False,
                                help="Regenerate copies and thumbnails that already exist.")
    optional_group.add_argument("-v", "--verbose", action="store_true", default=False,
                                help="Enable verbose (DEBUG level) logging.")
    return parser


def validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace):
    if args.width <= 0:
        parser.error(f"--width must be a positive integer, got {args.width}.")
    if not (1 <= args.quality <= 100):
        parser.error(f"--quality must be an integer between 1 and 100 (inclusive), got {args.quality}.")
    if args.workers < 1:
        parser.error(f"--workers must be at least 1, got {args.workers}.")
    if args.external and args.filter != 'lanczos':
        print("   -> Warning: --filter is ignored when --external-thumbs is used.")


def run(config: GalleryConfig) -> int:
    if config.verbose:
        for setup in (setup_gallery_logging, setup_thumbnail_logging, setup_external_logging):
            setup(logging.DEBUG)

    result = build_gallery(config)

    if result.status == STATUS_NO_IMAGES:
        print(f"No supported images found in {config.absolute_source_dir}")
        return 0

    print("-" * 30)
    print(f"{result.processed} thumbnail(s) generated.")
    if result.skipped_existing:
        print(f"{result.skipped_existing} existing thumbnail(s) kept.")
    if result.fallback_count:
        print(f"{result.fallback_count} image(s) used the original as thumbnail.")
    if result.errors:
        print("\nDetails for failed images:")
        for name, error in result.errors:
            print(f"  - File: {name}")
            print(f"    Error: {error}")

    if result.status == STATUS_ALL_FAILED:
        print("No images could be processed. Gallery page was not written.")
        return 1

    print("-" * 30)
    print(f"Gallery generated in: {result.output_dir}")
    print(f"Open {os.path.relpath(result.index_path)} in a browser or upload the folder to a static host.")
    return 0


def main(argv=None):
    parser = get_parser()
    args = parser.parse_args(argv)
    validate_args(parser, args)

    config = GalleryConfig(**vars(args))

    try:
        sys.exit(run(config))
    except GallerySetupError as e:
        print(f"(!) Error: {e}", file=sys.stderr)
        sys.exit(2)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"(!) An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(3)


if __name__ == "__main__":
    main()
