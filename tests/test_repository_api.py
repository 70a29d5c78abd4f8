"""레포지토리 랭킹 API 엔드포인트 테스트"""

from unittest.mock import AsyncMock, patch

import pytest

from app.core.exceptions import (
    GitHubRateLimitError,
    GitHubUnauthorizedError,
    NoRepositoriesError,
)
from app.domain.repository.schemas import GitHubUser, RankingResult, ScoredRepository

RANK_URL = "/api/v1/repositories/rank"
TOKEN = "ghp_testtoken1234567890"


@pytest.fixture
def ranking_result(make_repo):
    repositories = [make_repo("alice/x"), make_repo("alice/y")]
    return RankingResult(
        user=GitHubUser(login="alice"),
        all_repositories=repositories,
        repositories=[ScoredRepository(repository=repositories[0], score=30)],
    )


class TestRankEndpoint:
    """POST /api/v1/repositories/rank 테스트"""

    @pytest.mark.asyncio
    async def test_success(self, async_client, ranking_result):
        """랭킹 결과를 camelCase 응답으로 반환"""
        with patch(
            "app.api.v1.repository.rank_repositories",
            new_callable=AsyncMock,
            return_value=ranking_result,
        ) as mock_rank:
            async with async_client as client:
                response = await client.post(
                    RANK_URL, json={"githubToken": f" {TOKEN} ", "limit": 10}
                )

        assert response.status_code == 200
        body = response.json()
        assert body["username"] == "alice"
        assert body["totalRepositories"] == 2
        assert [r["name"] for r in body["repositories"]] == ["x"]
        assert body["repositories"][0]["score"] == 30
        assert len(body["recentRepositories"]) == 2
        mock_rank.assert_called_once_with(token=TOKEN, username=None, limit=10)

    @pytest.mark.asyncio
    async def test_request_id_header(self, async_client, ranking_result):
        """X-Request-ID 헤더를 응답에 그대로 반환"""
        with patch(
            "app.api.v1.repository.rank_repositories",
            new_callable=AsyncMock,
            return_value=ranking_result,
        ):
            async with async_client as client:
                response = await client.post(
                    RANK_URL,
                    json={"githubToken": TOKEN},
                    headers={"X-Request-ID": "abc12345"},
                )

        assert response.headers["X-Request-ID"] == "abc12345"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"githubToken": "   "},
            {"githubToken": TOKEN, "limit": 0},
            {"githubToken": TOKEN, "limit": 51},
        ],
    )
    async def test_invalid_request(self, async_client, payload):
        """잘못된 요청은 422"""
        async with async_client as client:
            response = await client.post(RANK_URL, json=payload)

        assert response.status_code == 422

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, status_code, error_code",
        [
            (GitHubUnauthorizedError(), 401, "GITHUB_UNAUTHORIZED"),
            (GitHubRateLimitError(), 429, "GITHUB_RATE_LIMITED"),
            (NoRepositoriesError("username=alice"), 404, "NO_REPOSITORIES"),
        ],
    )
    async def test_error_mapping(self, async_client, error, status_code, error_code):
        """도메인 예외를 에러 코드 응답으로 변환"""
        with patch(
            "app.api.v1.repository.rank_repositories",
            new_callable=AsyncMock,
            side_effect=error,
        ):
            async with async_client as client:
                response = await client.post(RANK_URL, json={"githubToken": TOKEN})

        assert response.status_code == status_code
        body = response.json()
        assert body["error_code"] == error_code
        assert body["message"] == error.message
