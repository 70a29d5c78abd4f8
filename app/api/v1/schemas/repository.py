"""레포지토리 랭킹 API 스키마."""

from pydantic import BaseModel, Field, field_validator

MAX_ENRICHMENT_LIMIT = 50


class RankRequest(BaseModel):
    """레포지토리 랭킹 요청."""

    github_token: str = Field(alias="githubToken")
    username: str | None = None
    limit: int | None = Field(default=None, ge=1, le=MAX_ENRICHMENT_LIMIT)

    @field_validator("github_token")
    @classmethod
    def validate_github_token(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("GitHub 토큰이 필요합니다")
        return v.strip()

    class Config:
        populate_by_name = True


class RankResponse(BaseModel):
    """레포지토리 랭킹 응답."""

    username: str
    total_repositories: int = Field(alias="totalRepositories")
    repositories: list[dict]
    recent_repositories: list[dict] = Field(alias="recentRepositories")

    class Config:
        populate_by_name = True
