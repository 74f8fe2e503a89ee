"""Project file listing for ``@`` suggestions."""

from pathlib import Path
from typing import Protocol

import structlog

from ideae.utils.async_subprocess import run_command

log = structlog.get_logger(__name__)

DEFAULT_FILE_LIMIT = 20


class FileLister(Protocol):
    """Source of project-relative paths matching a query."""

    async def list_files(self, query: str) -> list[str]: ...


class GitFileLister:
    """List tracked and untracked-but-not-ignored files via ``git ls-files``.

    Matching is a case-insensitive substring test on the relative path. An
    empty query lists nothing; any git failure yields an empty list.
    """

    def __init__(self, cwd: str | Path, limit: int = DEFAULT_FILE_LIMIT) -> None:
        self.cwd = Path(cwd)
        self.limit = limit

    async def list_files(self, query: str) -> list[str]:
        if not query:
            return []

        try:
            stdout, stderr, code = await run_command(
                "git", "ls-files", "--cached", "--others", "--exclude-standard", cwd=self.cwd, check=False
            )
        except OSError as e:
            log.debug("file_listing_failed", cwd=str(self.cwd), error=str(e))
            return []

        if code != 0:
            log.debug("file_listing_failed", cwd=str(self.cwd), returncode=code, stderr=stderr.strip())
            return []

        needle = query.lower()
        paths = (line.strip() for line in str(stdout).splitlines())
        return [path for path in paths if path and needle in path.lower()][: self.limit]
