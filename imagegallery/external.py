# -*- coding: utf-8 -*-
import os
import subprocess
import logging
from typing import List, Tuple

from imagegallery.thumbnail import ThumbnailError, THUMB_WIDTH

log_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(processName)s: %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

log_handler = logging.StreamHandler()
log_handler.setFormatter(log_formatter)

logger = logging.getLogger(__name__)
if not logger.hasHandlers():
    logger.addHandler(log_handler)
    logger.setLevel(logging.WARNING)

EXTERNAL_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.webp')

EXTERNAL_QUALITY = 85

EXTERNAL_TOOL_NAMES = {
    "imagemagick": "ImageMagick 'convert'",
    "ffmpeg": "ffmpeg scale filter",
    "sips": "sips (macOS only)",
}


def setup_logging(level: int):
    logger.setLevel(level)


def build_commands(src: str, dst: str, size: int = THUMB_WIDTH) -> List[Tuple[str, List[str]]]:
    """Return the external resize commands in the order they are tried."""
    return [
        ("imagemagick", [
            "convert",
            src,
            "-resize",
            f"{size}x{size}",
            "-quality",
            str(EXTERNAL_QUALITY),
            dst,
        ]),
        ("ffmpeg", [
            "ffmpeg",
            "-y",
            "-loglevel",
            "error",
            "-nostdin",
            "-i",
            src,
            "-vf",
            f"scale={size}:{size}:force_original_aspect_ratio=decrease",
            dst,
        ]),
        ("sips", [
            "sips",
            "-Z",
            str(size),
            src,
            "--out",
            dst,
        ]),
    ]


def run_command(command: List[str]) -> bool:
    # No timeout: a hanging tool blocks the run.
    try:
        subprocess.run(
            command,
            check=True,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.STDOUT,
        )
        return True
    except subprocess.CalledProcessError as e:
        logger.debug(f"'{command[0]}' exited with status {e.returncode}")
        return False
    except OSError as e:
        logger.debug(f"'{command[0]}' could not be started: {e}")
        return False


def make_external_thumbnail(src: str, dst: str, size: int = THUMB_WIDTH) -> str:
    """Shell out to the first external tool that succeeds.

    Returns the key of the tool that produced ``dst``. Raises
    :class:`ThumbnailError` when none of them exits with status 0.
    """
    attempted = []
    for tool_name, command in build_commands(src, dst, size):
        logger.debug(f"Trying {EXTERNAL_TOOL_NAMES[tool_name]} for '{os.path.basename(src)}'")
        if run_command(command):
            logger.debug(f"Thumbnail for '{os.path.basename(src)}' created with {tool_name}")
            return tool_name
        attempted.append(tool_name)
    raise ThumbnailError(f"All external tools failed ({', '.join(attempted)})")
