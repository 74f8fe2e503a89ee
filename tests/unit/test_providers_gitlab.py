"""Tests for the glab-backed GitLab provider."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from ideae.enums import IssueStatus, ProviderKind
from ideae.models.result import Ok
from ideae.providers.gitlab_cli import GitLabCliProvider


@pytest.fixture
def provider() -> GitLabCliProvider:
    return GitLabCliProvider("group/sub/project")


class TestListRemote:
    @pytest.mark.asyncio
    async def test_maps_gitlab_fields(self, provider: GitLabCliProvider) -> None:
        output = json.dumps(
            [
                {
                    "id": 90001,
                    "iid": 7,
                    "title": "Crash on save",
                    "description": "Stack trace attached",
                    "state": "opened",
                    "labels": ["bug"],
                    "created_at": "2026-02-01T10:00:00.000Z",
                    "updated_at": "2026-02-01T11:00:00.000Z",
                },
                {"iid": 8, "title": "Old", "description": None, "state": "closed", "labels": []},
            ]
        )

        with patch("ideae.providers.base.run_command", AsyncMock(return_value=(output, "", 0))) as mock_run:
            issues = await provider.list_remote()

        args = mock_run.call_args.args
        assert args[:3] == ("glab", "issue", "list")
        assert "--output" in args and "json" in args
        assert "--per-page" in args
        assert args[-2:] == ("--repo", "group/sub/project")

        assert [i.id for i in issues] == ["gl-7", "gl-8"]
        assert issues[0].remote.provider == ProviderKind.GITLAB
        assert issues[0].remote.number == 7
        assert issues[0].body == "Stack trace attached"
        assert issues[0].status == IssueStatus.OPEN
        assert issues[1].status == IssueStatus.CLOSED
        assert issues[1].body == ""

    @pytest.mark.asyncio
    async def test_failure_returns_empty(self, provider: GitLabCliProvider) -> None:
        with patch("ideae.providers.base.run_command", AsyncMock(return_value=("", "401", 1))):
            assert await provider.list_remote() == []


class TestCreateRemote:
    @pytest.mark.asyncio
    async def test_uses_description_flag(self, provider: GitLabCliProvider) -> None:
        mock_run = AsyncMock(return_value=("https://gitlab.com/group/sub/project/-/issues/12\n", "", 0))

        with patch("ideae.providers.base.run_command", mock_run):
            result = await provider.create_remote("Crash", "on save", [])

        assert result == Ok(12)
        args = mock_run.call_args.args
        assert "--description" in args
        assert "--body" not in args
        assert args[0] == "glab"


class TestFetchComments:
    @pytest.mark.asyncio
    async def test_filters_system_notes(self, provider: GitLabCliProvider) -> None:
        output = json.dumps(
            [
                {"id": 1, "author": {"username": "bob"}, "body": "Repro'd", "created_at": "2026-02-01T10:00:00Z"},
                {"id": 2, "author": {"username": "bot"}, "body": "added ~bug label", "system": True},
            ]
        )

        with patch("ideae.providers.base.run_command", AsyncMock(return_value=(output, "", 0))) as mock_run:
            comments = await provider.fetch_comments(7)

        args = mock_run.call_args.args
        assert args[:2] == ("glab", "api")
        assert "/projects/:id/issues/7/notes" in args
        assert len(comments) == 1
        assert comments[0].author == "bob"
        assert comments[0].id == "1"

    @pytest.mark.asyncio
    async def test_unparsable_returns_empty(self, provider: GitLabCliProvider) -> None:
        with patch("ideae.providers.base.run_command", AsyncMock(return_value=("<html>", "", 0))):
            assert await provider.fetch_comments(7) == []
