"""Async subprocess utilities.

Every external tool ideae talks to (``gh``, ``glab``, ``git``, clipboard
helpers) is driven through ``run_command`` so that a slow tool only blocks the
coroutine waiting on it, never the rest of the event loop.

Example:
    >>> from ideae.utils.async_subprocess import run_command
    >>> stdout, stderr, code = await run_command("git", "ls-files", cwd="/repo", check=False)
    >>> if code == 0:
    ...     print(stdout)
"""

import asyncio
import subprocess
from pathlib import Path


async def run_command(
    *args: str,
    cwd: Path | str | None = None,
    check: bool = True,
    timeout: float | None = None,
    text: bool = True,
) -> tuple[str | bytes, str, int]:
    """Run a command asynchronously without shell interpolation.

    Args:
        *args: Command and arguments as separate strings, e.g.
            ``"gh", "issue", "list", "--repo", "owner/repo"``.
        cwd: Working directory for the command. None uses the current
            working directory of the process.
        check: If True, raise CalledProcessError on a non-zero exit code.
        timeout: Maximum seconds to wait. None waits indefinitely, which is
            the default for remote tracker calls.
        text: If True, stdout is decoded as UTF-8 (invalid bytes replaced).
            If False, stdout is returned as raw bytes, which is what binary
            producers such as clipboard readers need.

    Returns:
        Tuple of (stdout, stderr, return_code).

    Raises:
        subprocess.CalledProcessError: If check=True and the command exits
            non-zero.
        asyncio.TimeoutError: If timeout is exceeded. The process is killed
            first.
        FileNotFoundError: If the executable is not installed.
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(),
            timeout=timeout,
        )
    except TimeoutError:
        process.kill()
        await process.wait()
        raise

    stdout: str | bytes = stdout_bytes or b""
    if text:
        stdout = stdout.decode("utf-8", errors="replace")
    stderr = (stderr_bytes or b"").decode("utf-8", errors="replace")

    if check and process.returncode != 0:
        raise subprocess.CalledProcessError(
            process.returncode,
            args,
            stdout,
            stderr,
        )

    return stdout, stderr, process.returncode or 0
