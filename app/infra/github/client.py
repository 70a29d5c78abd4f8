import asyncio
import base64
import binascii

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.exceptions import (
    GitHubAPIError,
    GitHubRateLimitError,
    GitHubUnauthorizedError,
    ValidationError,
)
from app.core.logging import get_logger
from app.domain.repository.schemas import (
    ContributorAggregate,
    GitHubUser,
    RepositorySummary,
)

logger = get_logger(__name__)

MIN_TOKEN_LENGTH = 10
CONTRIBUTORS_PER_PAGE = 100

# 본인 fork 유지 조건: 별 20개 이상 또는 fork 10개 이상
FORK_MIN_STARS = 20
FORK_MIN_FORKS = 10

_client = httpx.AsyncClient(base_url=settings.github_api_base, timeout=settings.github_timeout)


def _get_headers(token: str | None = None) -> dict[str, str]:
    """GitHub API 요청 헤더 생성

    Args:
        token: GitHub 토큰

    Returns:
        HTTP 헤더 딕셔너리
    """
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def close_client():
    """httpx 클라이언트 종료"""
    await _client.aclose()


async def _get_within(url: str, token: str, timeout: float) -> httpx.Response:
    """요청 전체에 timeout 적용, httpx timeout은 단계별 상한"""
    return await asyncio.wait_for(
        _client.get(url, headers=_get_headers(token), timeout=timeout),
        timeout=timeout,
    )


def _decode_content(data: dict, path: str, max_size_bytes: int) -> str | None:
    """contents API 응답의 base64 본문 디코딩, 크기 초과나 디코딩 실패 시 None"""
    declared_size = data.get("size")
    if isinstance(declared_size, int) and declared_size > max_size_bytes:
        logger.warning("파일 크기 초과 스킵", path=path, size=declared_size)
        return None

    content = data.get("content")
    if not isinstance(content, str) or not content or data.get("encoding") != "base64":
        return None

    try:
        raw = base64.b64decode(content.replace("\n", ""))
    except (binascii.Error, ValueError):
        logger.info("base64 디코딩 실패", path=path)
        return None

    if len(raw) > max_size_bytes:
        logger.warning("디코딩된 파일 크기 초과 스킵", path=path, size=len(raw))
        return None

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.info("바이너리 파일 스킵", path=path)
        return None


async def fetch_file_content(
    token: str,
    owner: str,
    repo: str,
    path: str,
    timeout: float | None = None,
    max_size_bytes: int | None = None,
) -> str | None:
    """레포지토리 파일 내용 조회

    어떤 실패도 예외로 전파하지 않고 None을 반환한다.
    크기 제한을 넘는 파일은 잘라내지 않고 None으로 처리한다.

    Args:
        token: GitHub 토큰
        owner: 레포지토리 소유자
        repo: 레포지토리 이름
        path: 파일 경로
        timeout: 요청 제한 시간(초), 기본 settings.github_file_timeout
        max_size_bytes: 최대 파일 크기, 기본 settings.github_file_max_bytes

    Returns:
        UTF-8 파일 내용, 없거나 조회 실패 시 None
    """
    timeout = settings.github_file_timeout if timeout is None else timeout
    max_size_bytes = settings.github_file_max_bytes if max_size_bytes is None else max_size_bytes

    try:
        response = await _get_within(f"/repos/{owner}/{repo}/contents/{path}", token, timeout)
        if not response.is_success:
            logger.debug(
                "파일 없음", repo=f"{owner}/{repo}", path=path, status_code=response.status_code
            )
            return None

        data = response.json()
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.warning("파일 조회 타임아웃", repo=f"{owner}/{repo}", path=path)
        return None
    except (httpx.HTTPError, ValueError) as e:
        logger.info(
            "파일 조회 실패", repo=f"{owner}/{repo}", path=path, error=type(e).__name__
        )
        return None

    if not isinstance(data, dict):
        return None

    return _decode_content(data, path, max_size_bytes)


async def fetch_languages(
    token: str,
    owner: str,
    repo: str,
    timeout: float | None = None,
) -> dict[str, int]:
    """레포지토리 언어별 바이트 수 조회

    Returns:
        언어별 바이트 수 딕셔너리, 실패 시 빈 딕셔너리
    """
    timeout = settings.github_file_timeout if timeout is None else timeout

    try:
        response = await _get_within(f"/repos/{owner}/{repo}/languages", token, timeout)
        if not response.is_success:
            return {}
        data = response.json()
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.warning("언어 조회 타임아웃", repo=f"{owner}/{repo}")
        return {}
    except (httpx.HTTPError, ValueError) as e:
        logger.info("언어 조회 실패", repo=f"{owner}/{repo}", error=type(e).__name__)
        return {}

    if not isinstance(data, dict):
        return {}

    return {
        str(language): size
        for language, size in data.items()
        if isinstance(size, int) and not isinstance(size, bool)
    }


async def _collect_contributors(token: str, owner: str, repo: str) -> list[dict]:
    """contributors 페이지네이션

    한 페이지가 가득 차지 않으면 더 이상 페이지가 없으므로 중단한다.
    """
    contributors: list[dict] = []

    for page in range(1, settings.github_contributor_max_pages + 1):
        response = await _client.get(
            f"/repos/{owner}/{repo}/contributors",
            headers=_get_headers(token),
            params={"per_page": CONTRIBUTORS_PER_PAGE, "page": page},
        )
        if not response.is_success:
            break

        data = response.json()
        if not isinstance(data, list) or not data:
            break

        contributors.extend(c for c in data if isinstance(c, dict))
        if len(data) < CONTRIBUTORS_PER_PAGE:
            break

    return contributors


def _login_of(contributor: dict) -> str:
    login = contributor.get("login")
    return login.lower().strip() if isinstance(login, str) else ""


def _contributions_of(contributor: dict | None) -> int:
    if not contributor:
        return 0
    value = contributor.get("contributions")
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


async def fetch_contributor_aggregate(
    token: str,
    owner: str,
    repo: str,
    username: str | None = None,
    timeout: float | None = None,
) -> ContributorAggregate:
    """레포 전체 커밋 수와 사용자 기여 커밋 수 집계

    contributors API를 최대 settings.github_contributor_max_pages 페이지까지 조회한다.
    제한 시간은 페이지네이션 전체에 적용되며, 실패 시 0/0을 반환한다.

    Args:
        token: GitHub 토큰
        owner: 레포지토리 소유자
        repo: 레포지토리 이름
        username: 기여도를 집계할 GitHub 유저네임
        timeout: 전체 제한 시간(초), 기본 settings.github_commit_timeout

    Returns:
        커밋 집계 결과
    """
    timeout = settings.github_commit_timeout if timeout is None else timeout
    username_lower = username.lower().strip() if username else ""

    try:
        contributors = await asyncio.wait_for(
            _collect_contributors(token, owner, repo), timeout=timeout
        )
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.warning("커밋 집계 타임아웃", repo=f"{owner}/{repo}")
        return ContributorAggregate()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("커밋 집계 실패", repo=f"{owner}/{repo}", error=type(e).__name__)
        return ContributorAggregate()

    if not contributors:
        return ContributorAggregate()

    total = sum(_contributions_of(c) for c in contributors)

    user_contributions = 0
    if username_lower:
        user = next((c for c in contributors if _login_of(c) == username_lower), None)
        user_contributions = _contributions_of(user)

    return ContributorAggregate(total=total, user_contributions=user_contributions)


async def get_authenticated_user(token: str) -> GitHubUser:
    """토큰 검증 후 인증된 사용자 프로필 조회

    Args:
        token: GitHub 토큰

    Returns:
        사용자 프로필

    Raises:
        ValidationError: 토큰이 비었거나 형식이 잘못된 경우
        GitHubUnauthorizedError: 토큰이 유효하지 않은 경우
        GitHubRateLimitError: 요청 한도 초과 또는 권한 부족
        GitHubAPIError: 네트워크 오류 또는 기타 API 오류
    """
    if not token or not token.strip():
        raise ValidationError("GitHub 토큰이 필요합니다")

    token = token.strip()
    if len(token) < MIN_TOKEN_LENGTH:
        raise ValidationError("GitHub 토큰 형식이 올바르지 않습니다")

    try:
        response = await _client.get("/user", headers=_get_headers(token))
    except httpx.HTTPError as e:
        raise GitHubAPIError(f"GitHub 연결 실패: {type(e).__name__}") from e

    if response.status_code == 401:
        raise GitHubUnauthorizedError()
    if response.status_code == 403:
        raise GitHubRateLimitError()
    if not response.is_success:
        raise GitHubAPIError(f"status_code={response.status_code}")

    try:
        user = GitHubUser.model_validate(response.json())
    except (ValueError, PydanticValidationError) as e:
        raise GitHubAPIError("사용자 프로필 응답 형식 오류") from e

    logger.info("사용자 조회 완료", login=user.login)
    return user


async def _get_repo_page(url: str, token: str, page: int) -> httpx.Response:
    params = {
        "per_page": settings.github_repos_per_page,
        "page": page,
        "sort": "updated",
        "direction": "desc",
    }
    return await _client.get(url, headers=_get_headers(token), params=params)


async def _fetch_repo_pages(token: str, username: str) -> list[dict]:
    """/user/repos 페이지네이션, page 1 실패 시 공개 레포 API로 폴백"""
    per_page = settings.github_repos_per_page
    repos: list[dict] = []

    for page in range(1, settings.github_max_pages + 1):
        try:
            response = await _get_repo_page("/user/repos", token, page)
        except httpx.HTTPError as e:
            logger.warning("레포 목록 조회 네트워크 오류", page=page, error=type(e).__name__)
            if repos:
                break
            raise GitHubAPIError("레포지토리 목록을 가져올 수 없습니다") from e

        if response.status_code in (403, 429):
            if repos:
                break
            raise GitHubRateLimitError()

        if not response.is_success:
            if page != 1:
                break
            logger.info("레포 목록 조회 실패, 공개 레포로 폴백", status_code=response.status_code)
            try:
                response = await _get_repo_page(f"/users/{username}/repos", token, page)
            except httpx.HTTPError as e:
                logger.warning("공개 레포 폴백 실패", error=type(e).__name__)
                break
            if not response.is_success:
                break

        try:
            data = response.json()
        except ValueError:
            logger.warning("레포 목록 응답 파싱 실패", page=page)
            break

        if not isinstance(data, list) or not data:
            break
        repos.extend(item for item in data if isinstance(item, dict))
        if len(data) < per_page:
            break

    return repos


def _is_relevant(repo: dict, username_lower: str) -> bool:
    """사용자와 관련 있는 레포인지 판단

    조직 소유 fork와 활동 없는 본인 fork는 제외하고,
    조직 레포는 이후 커밋 수로 걸러낸다.
    """
    full_name = repo.get("full_name")
    if not isinstance(full_name, str) or len(full_name.split("/")) < 2:
        logger.warning("잘못된 레포 이름 형식", full_name=full_name)
        return False

    owner = full_name.split("/")[0].lower().strip()
    owner_info = repo.get("owner")
    owner_login = owner_info.get("login") if isinstance(owner_info, dict) else None
    is_own = owner == username_lower or (
        isinstance(owner_login, str) and owner_login.lower().strip() == username_lower
    )
    is_fork = repo.get("fork") is True

    if not is_fork:
        return True
    if not is_own:
        return False

    stars = repo.get("stargazers_count")
    forks = repo.get("forks_count")
    stars = stars if isinstance(stars, int) else 0
    forks = forks if isinstance(forks, int) else 0
    return stars >= FORK_MIN_STARS or forks >= FORK_MIN_FORKS


async def list_repositories(token: str, username: str) -> list[RepositorySummary]:
    """사용자 레포지토리 목록 조회 (비공개 포함)

    최근 업데이트 순으로 최대 settings.github_max_pages 페이지를 조회하고
    id 기준으로 중복을 제거한 뒤 관련 없는 레포를 걸러낸다.

    Args:
        token: GitHub 토큰
        username: GitHub 유저네임

    Returns:
        관련 레포지토리 목록

    Raises:
        ValidationError: 토큰 또는 유저네임이 비어 있는 경우
        GitHubRateLimitError: 첫 페이지에서 요청 한도 초과
        GitHubAPIError: 첫 페이지에서 네트워크 오류
    """
    if not token or not token.strip() or not username or not username.strip():
        raise ValidationError("토큰과 유저네임이 필요합니다")

    token = token.strip()
    username = username.strip()

    raw_repos = await _fetch_repo_pages(token, username)

    unique_repos: dict = {}
    for repo in raw_repos:
        unique_repos[repo.get("id")] = repo

    username_lower = username.lower()
    repositories = []
    for repo in unique_repos.values():
        if not _is_relevant(repo, username_lower):
            continue
        try:
            repositories.append(RepositorySummary.model_validate(repo))
        except PydanticValidationError:
            logger.warning("레포 데이터 형식 오류 스킵", full_name=repo.get("full_name"))

    logger.info(
        "레포 목록 조회 완료",
        username=username,
        fetched=len(raw_repos),
        relevant=len(repositories),
    )
    return repositories
