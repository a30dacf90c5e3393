# -*- coding: utf-8 -*-
import os
import re
import shutil
import logging
import multiprocessing
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tqdm import tqdm

from imagegallery.thumbnail import (
    make_thumbnail,
    ThumbnailError,
    PILLOW_EXTENSIONS,
    PIL_RESAMPLE_FILTERS,
    THUMB_WIDTH,
    THUMB_QUALITY,
)
from imagegallery.external import make_external_thumbnail, EXTERNAL_EXTENSIONS
from imagegallery.render import write_gallery_assets, DEFAULT_TITLE

log_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(processName)s: %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

log_handler = logging.StreamHandler()
log_handler.setFormatter(log_formatter)

logger = logging.getLogger(__name__)
if not logger.hasHandlers():
    logger.addHandler(log_handler)
    logger.setLevel(logging.WARNING)

DEFAULT_OUTPUT_DIR = "gallery"
IMAGES_DIRNAME = "images"
THUMBS_DIRNAME = "thumbs"

# Path separators, Windows-reserved characters and ASCII control characters.
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]+')

STATUS_OK = "ok"
STATUS_NO_IMAGES = "no_images"
STATUS_ALL_FAILED = "all_failed"

MESSAGE_SKIPPED_EXISTING = "skipped_existing"
MESSAGE_FALLBACK = "fallback_thumbnail"


class GallerySetupError(Exception):
    """Critical error detected before any output is written."""
    pass


def setup_logging(level: int):
    logger.setLevel(level)


@dataclass
class GalleryConfig:
    """
    Settings for one gallery build, usually filled from command-line arguments.
    """
    source_dir: str
    title: str = DEFAULT_TITLE
    output_dir: str = DEFAULT_OUTPUT_DIR
    width: int = THUMB_WIDTH
    filter: str = 'lanczos'
    quality: int = THUMB_QUALITY
    external: bool = False # Shell out to ImageMagick / ffmpeg / sips instead of Pillow.
    workers: int = 1
    overwrite: bool = False
    verbose: bool = False

    absolute_source_dir: str = field(init=False, default='')
    absolute_output_dir: str = field(init=False, default='')

    def __post_init__(self):
        self.absolute_source_dir = os.path.abspath(self.source_dir)
        self.absolute_output_dir = os.path.abspath(self.output_dir)

    @property
    def images_dir(self) -> str:
        return os.path.join(self.absolute_output_dir, IMAGES_DIRNAME)

    @property
    def thumbs_dir(self) -> str:
        return os.path.join(self.absolute_output_dir, THUMBS_DIRNAME)

    @property
    def extensions(self) -> Tuple[str, ...]:
        return EXTERNAL_EXTENSIONS if self.external else PILLOW_EXTENSIONS


@dataclass
class GalleryResult:
    status: str
    output_dir: str
    items: List[str] = field(default_factory=list)
    processed: int = 0
    skipped_existing: int = 0
    fallback_count: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def index_path(self) -> Optional[str]:
        if self.status != STATUS_OK:
            return None
        return os.path.join(self.output_dir, "index.html")


def sanitize_filename(name: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def has_supported_extension(filename: str, extensions: Tuple[str, ...]) -> bool:
    return os.path.splitext(filename)[1].lower() in extensions


def scan_for_image_files(source_dir: str, extensions: Tuple[str, ...]) -> Tuple[List[str], List[str]]:
    """List supported images directly inside ``source_dir``.

    Returns ``(files, skipped_reasons)``. Files are sorted by name,
    case-insensitively.
    """
    files_to_process = []
    skipped_reasons = []

    with os.scandir(source_dir) as entries:
        for entry in entries:
            if not entry.is_file():
                skipped_reasons.append(f"Skipped '{entry.name}': not a regular file.")
                continue
            if not has_supported_extension(entry.name, extensions):
                skipped_reasons.append(f"Skipped '{entry.name}': unsupported extension.")
                continue
            files_to_process.append(entry.path)

    for reason in skipped_reasons:
        logger.debug(reason)

    files_to_process.sort(key=lambda p: (os.path.basename(p).lower(), os.path.basename(p)))
    return files_to_process, skipped_reasons


def _generate_thumbnail(image_path: str, thumb_path: str, config: GalleryConfig) -> None:
    if config.external:
        make_external_thumbnail(image_path, thumb_path, config.width)
    else:
        make_thumbnail(
            image_path,
            thumb_path,
            config.width,
            PIL_RESAMPLE_FILTERS[config.filter],
            config.quality,
        )


def process_gallery_item(source_path: str, config: GalleryConfig) -> Tuple[bool, Optional[str], str, str]:
    """Copy one original and build its thumbnail.

    Returns ``(success, message, source_path, safe_name)``. ``message`` is
    None when a thumbnail was generated, a marker for skipped or fallback
    thumbnails, or the error text when the file has to be dropped.
    """
    safe_name = sanitize_filename(os.path.basename(source_path))
    image_path = os.path.join(config.images_dir, safe_name)
    thumb_path = os.path.join(config.thumbs_dir, safe_name)

    try:
        if config.overwrite or not os.path.exists(image_path):
            shutil.copy2(source_path, image_path)
            logger.debug(f"Copied '{source_path}' -> '{image_path}'")
    except OSError as e:
        msg = f"Could not copy original ({e})."
        logger.error(f"Dropping '{safe_name}': {msg}")
        return False, msg, source_path, safe_name

    if not config.overwrite and os.path.exists(thumb_path):
        logger.debug(f"Thumbnail for '{safe_name}' already exists, skipping.")
        return True, MESSAGE_SKIPPED_EXISTING, source_path, safe_name

    try:
        _generate_thumbnail(image_path, thumb_path, config)
        return True, None, source_path, safe_name
    except ThumbnailError as e:
        logger.warning(f"Failed to make thumbnail for '{source_path}': {e}. Using the original image instead.")
    except Exception as e:
        logger.warning(f"Failed to make thumbnail for '{source_path}' ({type(e).__name__}: {e}). Using the original image instead.", exc_info=config.verbose)

    try:
        shutil.copyfile(image_path, thumb_path)
        return True, MESSAGE_FALLBACK, source_path, safe_name
    except OSError as e:
        msg = f"Could not copy original as thumbnail ({e})."
        logger.error(f"Dropping '{safe_name}': {msg}")
        return False, msg, source_path, safe_name


def static_process_item_worker(path_and_config: Tuple[str, GalleryConfig]) -> Tuple[bool, Optional[str], str, str]:
    source_path, config = path_and_config
    try:
        return process_gallery_item(source_path, config)
    except Exception as e:
        msg = f"An unexpected error occurred ({type(e).__name__}: {e})."
        logger.critical(f"Processing failed for '{source_path}': {msg}", exc_info=config.verbose)
        return False, msg, source_path, sanitize_filename(os.path.basename(source_path))


def _iter_results(files: List[str], config: GalleryConfig):
    tasks = [(path, config) for path in files]
    if config.workers <= 1 or len(tasks) <= 1:
        for task in tasks:
            yield static_process_item_worker(task)
        return

    num_processes = min(config.workers, len(tasks))
    logger.info(f"Processing {len(tasks)} images using {num_processes} processes...")
    with multiprocessing.Pool(processes=num_processes) as pool:
        # imap keeps the input order
        yield from pool.imap(static_process_item_worker, tasks)


def build_gallery(config: GalleryConfig) -> GalleryResult:
    source_dir = config.absolute_source_dir
    if not os.path.isdir(source_dir):
        raise GallerySetupError(f"Source path doesn't exist or is not a directory: {source_dir}")

    result = GalleryResult(status=STATUS_OK, output_dir=config.absolute_output_dir)

    try:
        files, _ = scan_for_image_files(source_dir, config.extensions)
    except OSError as e:
        raise GallerySetupError(f"Could not list source directory '{source_dir}': {e}") from e

    if not files:
        logger.warning(f"No supported images found in '{source_dir}'.")
        result.status = STATUS_NO_IMAGES
        return result

    try:
        os.makedirs(config.images_dir, exist_ok=True)
        os.makedirs(config.thumbs_dir, exist_ok=True)
    except OSError as e:
        raise GallerySetupError(f"Could not create output directory '{config.absolute_output_dir}': {e}") from e

    print(f"Found {len(files)} images. Processing...")

    with tqdm(total=len(files), desc="Processing images", unit="file", ncols=100, leave=True) as pbar:
        for success, message, source_path, safe_name in _iter_results(files, config):
            if success:
                result.items.append(safe_name)
                if message == MESSAGE_SKIPPED_EXISTING:
                    result.skipped_existing += 1
                elif message == MESSAGE_FALLBACK:
                    result.fallback_count += 1
                else:
                    result.processed += 1
            else:
                result.errors.append((safe_name, message or "Unknown error"))
            pbar.update(1)

    if not result.items:
        logger.error("No images survived processing; gallery page not written.")
        result.status = STATUS_ALL_FAILED
        return result

    write_gallery_assets(config.absolute_output_dir, config.title, result.items)
    logger.info(f"Gallery written to '{config.absolute_output_dir}' with {len(result.items)} images.")
    return result
