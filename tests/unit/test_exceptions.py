"""Tests for ideae.exceptions module."""

from pathlib import Path

import pytest

from ideae.exceptions import (
    ConfigurationError,
    DuplicateIdError,
    DuplicateRemoteIdentityError,
    GitDiscoveryError,
    IdeaeError,
    InvalidInputError,
    LoadCorruptionError,
    PersistenceError,
    ProviderNotSupportedError,
    RecordNotFoundError,
    RemoteOperationError,
    StoreError,
)


class TestIdeaeError:
    """Test base IdeaeError class."""

    def test_init_with_message(self):
        error = IdeaeError("Test error message")

        assert error.message == "Test error message"
        assert str(error) == "Test error message"

    def test_exception_chain(self):
        with pytest.raises(IdeaeError) as exc_info:
            raise IdeaeError("Wrapped error") from ValueError("Original error")

        assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad"),
            InvalidInputError("Title is required"),
            DuplicateIdError("a1"),
            RecordNotFoundError("#1"),
            RemoteOperationError("failed"),
            ProviderNotSupportedError("nope"),
            GitDiscoveryError("no remote"),
        ],
    )
    def test_all_errors_share_the_base(self, error):
        assert isinstance(error, IdeaeError)


class TestStoreErrors:
    """Test the store error family."""

    def test_duplicate_id(self):
        error = DuplicateIdError("a1b2")

        assert isinstance(error, StoreError)
        assert error.record_id == "a1b2"
        assert "a1b2" in error.message

    def test_duplicate_remote_identity(self):
        error = DuplicateRemoteIdentityError("github", 42, "gh-42")

        assert error.holder_id == "gh-42"
        assert error.message == "Remote issue github#42 is already linked to gh-42"

    def test_persistence_error(self):
        error = PersistenceError(Path("/tmp/issues.json"), "disk full")

        assert error.path == Path("/tmp/issues.json")
        assert error.message == "Failed to save /tmp/issues.json: disk full"

    def test_load_corruption(self):
        error = LoadCorruptionError(Path("issues.json"), "not a list")

        assert error.reason == "not a list"
        assert isinstance(error, StoreError)


class TestRemoteOperationError:
    """Test RemoteOperationError class."""

    def test_stderr_is_appended(self):
        error = RemoteOperationError("gh issue close failed", command=["gh", "issue"], stderr="  not found\n")

        assert error.message == "gh issue close failed: not found"
        assert error.command == ["gh", "issue"]

    def test_without_stderr(self):
        error = RemoteOperationError("gh issue close failed", returncode=1)

        assert error.message == "gh issue close failed"
        assert error.command == []
        assert error.returncode == 1


class TestRecordNotFoundError:
    def test_message(self):
        assert RecordNotFoundError("#7").message == "No issue matches '#7'"


class TestGitDiscoveryError:
    """Test GitDiscoveryError class."""

    def test_with_hint(self):
        error = GitDiscoveryError("Invalid Git URL", hint="Use SSH or HTTPS")

        assert str(error) == "Invalid Git URL\n\nHint: Use SSH or HTTPS"
        assert error.message == "Invalid Git URL"

    def test_without_hint(self):
        assert str(GitDiscoveryError("Invalid Git URL")) == "Invalid Git URL"
