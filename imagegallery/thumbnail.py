# -*- coding: utf-8 -*-
import os
import logging
from typing import Any, Tuple

from PIL import Image, UnidentifiedImageError

log_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(processName)s: %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

log_handler = logging.StreamHandler()
log_handler.setFormatter(log_formatter)

logger = logging.getLogger(__name__)
if not logger.hasHandlers():
    logger.addHandler(log_handler)
    logger.setLevel(logging.WARNING)

THUMB_WIDTH = 320
THUMB_QUALITY = 85

PILLOW_EXTENSIONS = ('.jpg', '.jpeg', '.png')

FILTER_NAMES = {
    "lanczos": "LANCZOS (High quality)",
    "bicubic": "BICUBIC (Medium quality)",
    "bilinear": "BILINEAR (Low quality)",
    "nearest": "NEAREST (Lowest quality)"
}

PIL_RESAMPLE_FILTERS = {
    "lanczos": Image.Resampling.LANCZOS,
    "bicubic": Image.Resampling.BICUBIC,
    "bilinear": Image.Resampling.BILINEAR,
    "nearest": Image.Resampling.NEAREST
}

# Destination suffix -> Pillow encoder name
ENCODER_FOR_EXTENSION = {
    '.jpg': 'JPEG',
    '.jpeg': 'JPEG',
    '.png': 'PNG',
    '.gif': 'GIF',
    '.webp': 'WEBP',
}


class ThumbnailError(Exception):
    """Raised when a thumbnail cannot be produced for a single image."""
    pass


def setup_logging(level: int):
    logger.setLevel(level)


def encoder_for_path(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    encoder = ENCODER_FOR_EXTENSION.get(ext)
    if encoder is None:
        raise ThumbnailError(f"No encoder available for extension '{ext or '(none)'}'")
    return encoder


def thumbnail_size(original_width: int, original_height: int, target_width: int) -> Tuple[int, int]:
    """Return the thumbnail dimensions for an image, keeping aspect ratio.

    Images already no wider than ``target_width`` keep their size. Wider ones
    are scaled to exactly ``target_width`` with the height rounded half-up.
    """
    if original_width <= target_width:
        return original_width, original_height
    ratio = target_width / original_width
    new_height = max(1, int(original_height * ratio + 0.5))
    return target_width, new_height


def prepare_image_for_save(img: Image.Image, encoder: str) -> Image.Image:
    save_img = img
    original_mode = img.mode

    if encoder == 'JPEG':
        if img.mode in ('RGBA', 'LA', 'P'):
            background = Image.new("RGB", img.size, (255, 255, 255))
            if img.mode == 'P':
                try:
                    mask = img.convert("RGBA").split()[3]
                    background.paste(img.convert("RGB"), mask=mask)
                except IndexError:
                    background.paste(img.convert("RGB"))
            else:
                background.paste(img.convert("RGB"), mask=img.split()[-1])
            save_img = background
        elif img.mode != 'RGB':
            save_img = img.convert('RGB')
    elif encoder == 'WEBP':
        if img.mode == 'P':
            save_img = img.convert("RGBA") if 'transparency' in img.info else img.convert("RGB")

    if save_img.mode != original_mode:
        logger.debug(f"Image mode converted: '{original_mode}' -> '{save_img.mode}' (encoder: {encoder})")
    return save_img


def _save_kwargs(encoder: str, quality: int) -> dict:
    if encoder == 'JPEG':
        return {'quality': quality, 'optimize': True}
    if encoder == 'WEBP':
        return {'quality': quality}
    if encoder == 'PNG':
        return {'optimize': True}
    return {}


def make_thumbnail(src: str, dst: str, width: int = THUMB_WIDTH,
                   resample_filter: Any = Image.Resampling.LANCZOS,
                   quality: int = THUMB_QUALITY) -> Tuple[int, int]:
    """Write a copy of ``src`` no wider than ``width`` pixels to ``dst``.

    The encoder follows the suffix of ``dst``. Returns the written size.
    Any failure is reported as :class:`ThumbnailError`; a partially written
    ``dst`` is removed first.
    """
    if width <= 0:
        raise ThumbnailError(f"Thumbnail width must be positive, got {width}")
    encoder = encoder_for_path(dst)

    try:
        with Image.open(src) as img:
            img.load()
            original_size = img.size
            new_size = thumbnail_size(img.width, img.height, width)
            if new_size == original_size:
                logger.debug(f"'{os.path.basename(src)}' is {original_size[0]}px wide, re-encoding without resize.")
                processed_img = img
            else:
                logger.debug(f"Resizing '{os.path.basename(src)}': {original_size} -> {new_size}")
                processed_img = img.resize(new_size, resample_filter)

            processed_img = prepare_image_for_save(processed_img, encoder)
            processed_img.save(dst, format=encoder, **_save_kwargs(encoder, quality))
            return processed_img.size

    except UnidentifiedImageError as e:
        raise ThumbnailError(f"Unsupported or corrupt image '{os.path.basename(src)}'") from e
    except Image.DecompressionBombError as e:
        raise ThumbnailError(f"Image '{os.path.basename(src)}' is too large to decode safely") from e
    except (OSError, ValueError) as e:
        if os.path.exists(dst):
            try:
                os.remove(dst)
                logger.debug(f"Removed partially written thumbnail '{dst}'")
            except OSError as rm_e:
                logger.error(f"Could not remove partially written thumbnail '{dst}': {rm_e}")
        raise ThumbnailError(f"Could not write thumbnail for '{os.path.basename(src)}': {e}") from e
