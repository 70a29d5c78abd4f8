from fastapi import APIRouter

from app.api.v1.schemas.repository import RankRequest, RankResponse
from app.domain.repository.prompt_context import (
    build_repository_context,
    select_context_repositories,
)
from app.domain.repository.service import rank_repositories

router = APIRouter(prefix="/repositories", tags=["repositories"])


@router.post("/rank", response_model=RankResponse, response_model_by_alias=True)
async def rank(request: RankRequest) -> RankResponse:
    result = await rank_repositories(
        token=request.github_token,
        username=request.username,
        limit=request.limit,
    )

    return RankResponse(
        username=result.user.login,
        total_repositories=result.total_repositories,
        repositories=build_repository_context(result.repositories),
        recent_repositories=select_context_repositories(result.all_repositories),
    )
