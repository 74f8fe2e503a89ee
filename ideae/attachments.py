"""Pasted images.

Images pasted into an issue are stored under ``<data dir>/images`` and
referenced from the issue text by their project-relative path. The issue
model never sees image bytes, only the resulting path.
"""

import base64
import binascii
import re
import time
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import structlog

from ideae.utils.async_subprocess import run_command

log = structlog.get_logger(__name__)

IMAGES_DIR = "images"

DATA_URI_PATTERN = re.compile(r"^data:image/(png|jpeg|jpg|gif|webp);base64,(.+)$", re.DOTALL)

CLIPBOARD_COMMANDS: list[tuple[list[str], str]] = [
    (["wl-paste", "--type", "image/png", "--no-newline"], "png"),
    (["xclip", "-selection", "clipboard", "-t", "image/png", "-o"], "png"),
]


@dataclass
class ImagePayload:
    data: bytes
    extension: str


def decode_data_uri(text: str) -> ImagePayload | None:
    """Decode a base64 ``data:image/...`` URI.

    Returns:
        The image bytes and file extension, or None if ``text`` is not an
        image data URI
    """
    match = DATA_URI_PATTERN.match(text.strip())
    if not match:
        return None

    extension = "jpg" if match.group(1) == "jpeg" else match.group(1)
    try:
        data = base64.b64decode(match.group(2), validate=False)
    except (binascii.Error, ValueError):
        return None
    if not data:
        return None
    return ImagePayload(data=data, extension=extension)


async def read_clipboard_image() -> ImagePayload | None:
    """Read a PNG from the system clipboard via wl-paste, then xclip."""
    for command, extension in CLIPBOARD_COMMANDS:
        try:
            stdout, _, code = await run_command(*command, check=False, text=False)
        except OSError:
            log.debug("clipboard_tool_missing", tool=command[0])
            continue
        if code == 0 and stdout:
            return ImagePayload(data=bytes(stdout), extension=extension)
    return None


async def save_image(data_dir: Path, image: ImagePayload) -> Path:
    """Write ``image`` to ``<data_dir>/images/paste-<millis>.<ext>``.

    Raises:
        OSError: If the image cannot be written
    """
    images_dir = data_dir / IMAGES_DIR
    images_dir.mkdir(parents=True, exist_ok=True)
    path = images_dir / f"paste-{int(time.time() * 1000)}.{image.extension}"

    async with aiofiles.open(path, "wb") as f:
        await f.write(image.data)

    log.info("image_saved", path=str(path), size=len(image.data))
    return path


def image_markdown(path: Path, cwd: Path) -> str:
    """Markdown image reference, relative to ``cwd`` when inside it."""
    try:
        shown = path.relative_to(cwd)
    except ValueError:
        shown = path
    return f"![image]({shown.as_posix()})"
