"""레포지토리 컨텍스트 구성 테스트"""

from app.domain.repository.prompt_context import (
    build_repository_context,
    select_context_repositories,
)
from app.domain.repository.schemas import PackageManifest, ScoredRepository


class TestSelectContextRepositories:
    """select_context_repositories 함수 테스트"""

    def test_recency_and_stars(self, make_repo):
        """별 하나는 최근성 2주로 환산"""
        repositories = [
            make_repo("alice/recent", updated_at="2024-05-20T00:00:00Z"),
            make_repo("alice/starred", updated_at="2024-05-01T00:00:00Z", stars=2),
            make_repo("alice/old", updated_at="2023-01-01T00:00:00Z"),
        ]
        result = select_context_repositories(repositories)

        assert [r["name"] for r in result] == ["starred", "recent", "old"]
        assert result[0]["updated"] == "2024-05-01"
        assert result[0]["stars"] == 2

    def test_limit(self, make_repo):
        """limit개까지만 반환"""
        repositories = [make_repo(f"alice/r{i}") for i in range(10)]
        assert len(select_context_repositories(repositories, limit=3)) == 3

    def test_missing_timestamp(self, make_repo):
        """갱신 시각이 없으면 가장 뒤로, 표시값은 unknown"""
        repositories = [make_repo("alice/none", updated_at=None), make_repo("alice/dated")]
        result = select_context_repositories(repositories)

        assert [r["name"] for r in result] == ["dated", "none"]
        assert result[1]["updated"] == "unknown"


class TestBuildRepositoryContext:
    """build_repository_context 함수 테스트"""

    def test_without_enrichment(self, make_repo):
        """분석 데이터가 없으면 기본 메타데이터만"""
        scored = ScoredRepository(repository=make_repo("alice/x", stars=4), score=30)
        [entry] = build_repository_context([scored])

        assert entry == {
            "name": "x",
            "url": "https://github.com/alice/x",
            "homepage": None,
            "isPrivate": False,
            "stars": 4,
            "score": 30,
        }

    def test_with_enrichment(self, make_scored, make_enrichment):
        """분석 데이터와 스크립트 플래그 포함"""
        enrichment = make_enrichment(
            commit_count=42,
            user_commit_count=40,
            readme_length=1200,
            scripts=["test:unit", "build"],
            languages={"TypeScript": 3000, "CSS": 200},
            technologies=[f"tech{i}" for i in range(30)],
            project_type="dashboard",
            tech_mentions=["react"],
        )
        enrichment = enrichment.model_copy(
            update={"package_json": PackageManifest(scripts=["test:unit", "build"], description="Admin UI")}
        )
        [entry] = build_repository_context([make_scored("alice/admin", enrichment=enrichment)])

        assert entry["commits"] == 42
        assert entry["userCommits"] == 40
        assert entry["codeSize"] == 3200
        assert entry["languageCount"] == 2
        assert entry["packageDescription"] == "Admin UI"
        assert len(entry["dependencies"]) == 20
        assert (entry["hasTests"], entry["hasBuild"], entry["hasLint"]) == (True, True, False)
        assert entry["projectType"] == "dashboard"
        assert entry["techStack"] == ["react"]
        assert entry["readmeLength"] == 1200
        assert entry["isMLProject"] is False
