"""Git remote discovery and URL parsing.

Example:
    >>> from ideae.git import detect_remote
    >>> remote = detect_remote(".")
    >>> if remote:
    ...     print(f"{remote.provider}: {remote.repo}")
    github: owner/repo
"""

from ideae.git.discovery import DetectedRemote, GitDiscovery, detect_remote
from ideae.git.parser import GitUrlParser

__all__ = [
    "DetectedRemote",
    "GitDiscovery",
    "GitUrlParser",
    "detect_remote",
]
