from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ProjectType = Literal[
    "application",
    "library",
    "api",
    "cli-tool",
    "dashboard",
    "mobile-app",
    "website",
    "ml-project",
    "data-science",
]
Complexity = Literal["simple", "moderate", "complex"]


class RepositoryOwner(BaseModel):
    """레포지토리 소유자"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    login: str
    type: str | None = None


class RepositorySummary(BaseModel):
    """GitHub 레포지토리 메타데이터

    GitHub REST 응답을 그대로 검증하며 알 수 없는 필드는 무시한다.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    full_name: str
    owner: RepositoryOwner | None = None
    private: bool = False
    html_url: str = ""
    description: str | None = None
    fork: bool = False
    created_at: str | None = None
    updated_at: str | None = None
    pushed_at: str | None = None
    homepage: str | None = None
    size: int = 0
    stargazers_count: int = 0
    watchers_count: int = 0
    language: str | None = None
    forks_count: int = 0
    topics: list[str] = Field(default_factory=list)

    @property
    def owner_name(self) -> str | None:
        """full_name의 owner 부분, 형식이 잘못되면 None"""
        parts = self.full_name.split("/")
        if len(parts) < 2:
            return None
        return parts[0]

    @property
    def repo_name(self) -> str | None:
        """full_name의 레포 이름 부분, 슬래시가 포함된 이름은 나머지를 그대로 유지"""
        parts = self.full_name.split("/")
        if len(parts) < 2:
            return None
        return "/".join(parts[1:])

    def is_owned_by(self, username: str) -> bool:
        owner = self.owner_name
        if owner is None:
            return False
        return owner.lower().strip() == username.lower().strip()


class GitHubUser(BaseModel):
    """인증된 GitHub 사용자 프로필"""

    model_config = ConfigDict(extra="ignore")

    login: str
    name: str | None = None
    html_url: str = ""
    avatar_url: str = ""
    company: str | None = None
    blog: str | None = None
    location: str | None = None
    email: str | None = None
    bio: str | None = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0
    created_at: str | None = None


class ContributorAggregate(BaseModel):
    """레포 전체 커밋 수와 사용자 기여 커밋 수"""

    total: int = 0
    user_contributions: int = 0


class PackageManifest(BaseModel):
    """package.json 분석 결과"""

    model_config = ConfigDict(frozen=True)

    dependencies: list[str] = Field(default_factory=list)
    dev_dependencies: list[str] = Field(default_factory=list)
    scripts: list[str] = Field(default_factory=list)
    description: str | None = None


class NotebookAnalysis(BaseModel):
    """Jupyter 노트북 import 분석 결과"""

    model_config = ConfigDict(frozen=True)

    imports: list[str] = Field(default_factory=list)
    is_ml: bool = False
    is_data_science: bool = False


class ReadmeAnalysis(BaseModel):
    """README 휴리스틱 분석 결과"""

    model_config = ConfigDict(frozen=True)

    project_type: ProjectType = "application"
    has_demo: bool = False
    has_docs: bool = False
    has_metrics: bool = False
    complexity: Complexity = "simple"
    mentions: list[str] = Field(default_factory=list)


class ReadmeSummary(BaseModel):
    """EnrichmentRecord에 저장되는 README 요약"""

    model_config = ConfigDict(frozen=True)

    length: int = 0
    has_demo: bool = False
    has_docs: bool = False
    tech_mentions: list[str] = Field(default_factory=list)
    project_type: ProjectType = "application"
    has_metrics: bool = False
    complexity: Complexity = "simple"


class EnrichmentRecord(BaseModel):
    """레포지토리 심층 분석 결과

    하위 조회가 실패한 항목은 비어 있거나 None으로 남는다.
    """

    model_config = ConfigDict(frozen=True)

    package_json: PackageManifest | None = None
    python_dependencies: list[str] = Field(default_factory=list)
    ecosystem_dependencies: dict[str, list[str]] = Field(default_factory=dict)
    notebook_imports: list[str] = Field(default_factory=list)
    commit_count: int = 0
    user_commit_count: int = 0
    languages: dict[str, int] = Field(default_factory=dict)
    language_count: int = 0
    total_code_bytes: int = 0
    readme: ReadmeSummary = Field(default_factory=ReadmeSummary)
    is_ml_project: bool = False
    is_data_science: bool = False
    detected_technologies: list[str] = Field(default_factory=list)


class ScoredRepository(BaseModel):
    """점수가 매겨진 레포지토리"""

    model_config = ConfigDict(frozen=True)

    repository: RepositorySummary
    enrichment: EnrichmentRecord | None = None
    score: int = 0


class RankingResult(BaseModel):
    """레포지토리 랭킹 파이프라인 결과"""

    user: GitHubUser
    all_repositories: list[RepositorySummary]
    repositories: list[ScoredRepository]

    @property
    def total_repositories(self) -> int:
        return len(self.all_repositories)
