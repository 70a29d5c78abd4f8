from app.core.exceptions import NoRepositoriesError
from app.core.logging import get_logger
from app.domain.repository.enrichment import enrich_repositories
from app.domain.repository.schemas import RankingResult
from app.domain.repository.scoring import score_repositories
from app.infra.github.client import get_authenticated_user, list_repositories

logger = get_logger(__name__)


async def rank_repositories(
    token: str,
    username: str | None = None,
    limit: int | None = None,
) -> RankingResult:
    """GitHub 활동 기반 레포지토리 랭킹

    토큰 검증, 레포 목록 조회, 상위 레포 심층 분석, 점수 계산을 순서대로 수행한다.

    Args:
        token: GitHub 토큰
        username: 대상 유저네임, 없으면 토큰 소유자
        limit: 심층 분석할 최대 레포 수

    Returns:
        사용자 정보와 정렬된 레포 목록

    Raises:
        NoRepositoriesError: 조회된 레포가 없는 경우
    """
    user = await get_authenticated_user(token)
    username = (username or "").strip() or user.login

    repositories = await list_repositories(token, username)
    if not repositories:
        raise NoRepositoriesError(f"username={username}")

    enriched = await enrich_repositories(token, repositories, username, limit)
    ranked = score_repositories(enriched, username)

    logger.info(
        "레포 랭킹 완료",
        username=username,
        repositories=len(repositories),
        ranked=len(ranked),
    )
    return RankingResult(
        user=user,
        all_repositories=repositories,
        repositories=ranked,
    )
