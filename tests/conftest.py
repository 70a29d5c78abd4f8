"""테스트 공통 fixture"""

import base64
import itertools

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.core.limiter import limiter
from app.domain.repository.schemas import (
    EnrichmentRecord,
    PackageManifest,
    ReadmeSummary,
    RepositorySummary,
    ScoredRepository,
)
from app.main import app

_repo_ids = itertools.count(1)


@pytest.fixture(autouse=True)
def reset_rate_limit():
    """테스트 간 요청 제한 카운터 초기화"""
    limiter.reset()
    yield


@pytest.fixture
def make_raw_repo():
    """GitHub REST 레포 응답 형태의 dict 생성 helper"""

    def _create(
        full_name: str = "alice/project",
        repo_id: int | None = None,
        fork: bool = False,
        private: bool = False,
        stars: int = 0,
        forks: int = 0,
        updated_at: str = "2024-05-01T00:00:00Z",
        **extra,
    ) -> dict:
        owner, _, name = full_name.partition("/")
        data = {
            "id": repo_id if repo_id is not None else next(_repo_ids),
            "name": name or full_name,
            "full_name": full_name,
            "owner": {"login": owner, "type": "User"},
            "private": private,
            "html_url": f"https://github.com/{full_name}",
            "description": None,
            "fork": fork,
            "created_at": "2023-01-01T00:00:00Z",
            "updated_at": updated_at,
            "pushed_at": updated_at,
            "homepage": None,
            "size": 100,
            "stargazers_count": stars,
            "watchers_count": stars,
            "language": "Python",
            "forks_count": forks,
            "topics": [],
        }
        data.update(extra)
        return data

    return _create


@pytest.fixture
def make_repo(make_raw_repo):
    """RepositorySummary 생성 helper"""

    def _create(full_name: str = "alice/project", **kwargs) -> RepositorySummary:
        return RepositorySummary.model_validate(make_raw_repo(full_name, **kwargs))

    return _create


@pytest.fixture
def make_enrichment():
    """EnrichmentRecord 생성 helper"""

    def _create(
        commit_count: int = 0,
        user_commit_count: int = 0,
        readme_length: int = 0,
        scripts: list[str] | None = None,
        languages: dict[str, int] | None = None,
        technologies: list[str] | None = None,
        **readme_fields,
    ) -> EnrichmentRecord:
        languages = languages or {}
        return EnrichmentRecord(
            package_json=PackageManifest(scripts=scripts) if scripts is not None else None,
            commit_count=commit_count,
            user_commit_count=user_commit_count,
            languages=languages,
            language_count=len(languages),
            total_code_bytes=sum(languages.values()),
            readme=ReadmeSummary(length=readme_length, **readme_fields),
            detected_technologies=technologies or [],
        )

    return _create


@pytest.fixture
def make_scored(make_repo):
    """ScoredRepository 생성 helper"""

    def _create(
        full_name: str = "alice/project",
        enrichment: EnrichmentRecord | None = None,
        **repo_kwargs,
    ) -> ScoredRepository:
        return ScoredRepository(repository=make_repo(full_name, **repo_kwargs), enrichment=enrichment)

    return _create


@pytest.fixture
def json_response():
    """httpx.Response 생성 helper"""

    def _create(payload=None, status_code: int = 200) -> httpx.Response:
        if payload is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=payload)

    return _create


@pytest.fixture
def contents_payload():
    """contents API 응답 형태의 base64 payload 생성 helper"""

    def _create(text: str, size: int | None = None) -> dict:
        raw = text.encode("utf-8")
        encoded = base64.b64encode(raw).decode("ascii")
        # GitHub는 60자마다 줄바꿈을 넣어 반환한다
        wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
        return {
            "type": "file",
            "encoding": "base64",
            "size": len(raw) if size is None else size,
            "content": wrapped,
        }

    return _create


@pytest.fixture
def async_client():
    """비동기 HTTP 클라이언트"""
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")
