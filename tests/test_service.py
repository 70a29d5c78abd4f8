"""레포지토리 랭킹 서비스 테스트"""

from unittest.mock import AsyncMock, patch

import pytest

from app.core.exceptions import GitHubUnauthorizedError, NoRepositoriesError
from app.domain.repository.schemas import GitHubUser, ScoredRepository
from app.domain.repository.service import rank_repositories

TOKEN = "ghp_testtoken1234567890"


class TestRankRepositories:
    """rank_repositories 함수 테스트"""

    @pytest.mark.asyncio
    async def test_defaults_username_to_token_owner(self, make_repo):
        """유저네임이 없으면 토큰 소유자 기준"""
        repositories = [make_repo("alice/x"), make_repo("org/y")]
        enriched = [ScoredRepository(repository=r) for r in repositories]

        with (
            patch(
                "app.domain.repository.service.get_authenticated_user",
                new_callable=AsyncMock,
                return_value=GitHubUser(login="alice"),
            ),
            patch(
                "app.domain.repository.service.list_repositories",
                new_callable=AsyncMock,
                return_value=repositories,
            ) as mock_list,
            patch(
                "app.domain.repository.service.enrich_repositories",
                new_callable=AsyncMock,
                return_value=enriched,
            ) as mock_enrich,
        ):
            result = await rank_repositories(TOKEN, username="  ", limit=5)

        mock_list.assert_called_once_with(TOKEN, "alice")
        mock_enrich.assert_called_once_with(TOKEN, repositories, "alice", 5)
        assert result.user.login == "alice"
        assert result.total_repositories == 2
        assert [r.repository.full_name for r in result.repositories] == ["alice/x"]
        assert result.repositories[0].score > 0

    @pytest.mark.asyncio
    async def test_explicit_username(self, make_repo):
        """유저네임을 지정하면 해당 사용자 기준"""
        repositories = [make_repo("bob/x")]

        with (
            patch(
                "app.domain.repository.service.get_authenticated_user",
                new_callable=AsyncMock,
                return_value=GitHubUser(login="alice"),
            ),
            patch(
                "app.domain.repository.service.list_repositories",
                new_callable=AsyncMock,
                return_value=repositories,
            ) as mock_list,
            patch(
                "app.domain.repository.service.enrich_repositories",
                new_callable=AsyncMock,
                return_value=[ScoredRepository(repository=repositories[0])],
            ),
        ):
            result = await rank_repositories(TOKEN, username="bob")

        mock_list.assert_called_once_with(TOKEN, "bob")
        assert [r.repository.full_name for r in result.repositories] == ["bob/x"]

    @pytest.mark.asyncio
    async def test_no_repositories(self):
        """레포가 없으면 NoRepositoriesError"""
        with (
            patch(
                "app.domain.repository.service.get_authenticated_user",
                new_callable=AsyncMock,
                return_value=GitHubUser(login="alice"),
            ),
            patch(
                "app.domain.repository.service.list_repositories",
                new_callable=AsyncMock,
                return_value=[],
            ),
            patch(
                "app.domain.repository.service.enrich_repositories",
                new_callable=AsyncMock,
            ) as mock_enrich,
        ):
            with pytest.raises(NoRepositoriesError):
                await rank_repositories(TOKEN)

        mock_enrich.assert_not_called()

    @pytest.mark.asyncio
    async def test_authentication_failure_propagates(self):
        """인증 실패는 그대로 전파"""
        with (
            patch(
                "app.domain.repository.service.get_authenticated_user",
                new_callable=AsyncMock,
                side_effect=GitHubUnauthorizedError(),
            ),
            patch(
                "app.domain.repository.service.list_repositories",
                new_callable=AsyncMock,
            ) as mock_list,
        ):
            with pytest.raises(GitHubUnauthorizedError):
                await rank_repositories(TOKEN)

        mock_list.assert_not_called()
