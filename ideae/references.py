"""
``@`` file references inside issue text.

A reference is ``@`` followed by a project-relative path, optionally with a
line or line range::

    see @src/app.py#10-25 and @README.md

Only tokens that look like paths (containing ``.`` or ``/``) are treated as
file references; ``@alice`` stays a mention.
"""

import re
from pathlib import Path

import aiofiles
import structlog

from ideae.models.domain import FileRef, LineRange

log = structlog.get_logger(__name__)

AT_REF_PATTERN = re.compile(r"@([\w./-]+(?:#\d+(?:-\d+)?)?)", re.ASCII)
LINE_SPEC_PATTERN = re.compile(r"^(.+?)#(\d+)(?:-(\d+))?$")


def looks_like_path(raw: str) -> bool:
    return "." in raw or "/" in raw


def parse_at_ref(ref: str) -> FileRef | None:
    """Parse ``@path`` or ``@path#start[-end]`` into a FileRef.

    Example:
        >>> parse_at_ref("@src/app.py#10-25")
        FileRef(path='src/app.py', lines=LineRange(start=10, end=25))
    """
    raw = ref.removeprefix("@")
    if not raw:
        return None

    match = LINE_SPEC_PATTERN.match(raw)
    if match:
        start = max(1, int(match.group(2)))
        end = int(match.group(3)) if match.group(3) else None
        if end is not None:
            end = max(start, end)
        return FileRef(path=match.group(1), lines=LineRange(start=start, end=end))

    return FileRef(path=raw)


def extract_file_refs(text: str) -> tuple[str, list[FileRef]]:
    """Pull every path-like ``@`` reference out of ``text``.

    Returns:
        The text with those references removed and whitespace collapsed,
        and the references in order of appearance
    """
    refs: list[FileRef] = []
    for match in AT_REF_PATTERN.finditer(text):
        raw = match.group(1)
        if looks_like_path(raw):
            ref = parse_at_ref(raw)
            if ref is not None:
                refs.append(ref)

    def strip_ref(match: re.Match[str]) -> str:
        return "" if looks_like_path(match.group(1)) else match.group(0)

    clean = AT_REF_PATTERN.sub(strip_ref, text)
    clean = re.sub(r"\s+", " ", clean).strip()
    return clean, refs


async def read_file_content(cwd: str | Path, ref: FileRef) -> str | None:
    """Read a referenced file, narrowed to its line range when present.

    Returns:
        The content, or None if the file is missing or unreadable
    """
    full_path = Path(cwd) / ref.path
    if not full_path.is_file():
        return None

    try:
        async with aiofiles.open(full_path, encoding="utf-8", errors="replace") as f:
            content = await f.read()
    except OSError as e:
        log.debug("file_ref_unreadable", path=str(full_path), error=str(e))
        return None

    if ref.lines is None:
        return content

    lines = content.split("\n")
    start = ref.lines.start - 1
    end = ref.lines.end if ref.lines.end is not None else ref.lines.start
    return "\n".join(lines[start:end])
