"""레포지토리 점수 계산 및 필터링

규칙은 (조건, 점수) 단계의 순서 있는 표로 정의한다.
각 규칙은 처음 만족하는 단계 하나만 적용된다.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from app.core.logging import get_logger
from app.domain.repository.constants import REMOVAL_THRESHOLD, SENTINEL_SCORE
from app.domain.repository.schemas import (
    EnrichmentRecord,
    RepositorySummary,
    ScoredRepository,
)

logger = get_logger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


@dataclass(frozen=True)
class ScoringContext:
    """규칙 평가에 필요한 레포별 파생 값"""

    repository: RepositorySummary
    enrichment: EnrichmentRecord | None
    is_owned: bool
    days_since_update: float
    user_commits: int = 0
    total_commits: int = 0
    contribution_ratio: float = 0.0

    @property
    def is_fork(self) -> bool:
        return self.repository.fork

    @property
    def is_public(self) -> bool:
        return not self.repository.private

    @property
    def stars(self) -> int:
        return self.repository.stargazers_count

    @property
    def forks(self) -> int:
        return self.repository.forks_count

    @property
    def relevant_commits(self) -> int:
        """본인 레포는 전체 커밋, 그 외는 사용자 커밋"""
        return self.total_commits if self.is_owned else self.user_commits

    @property
    def code_kb(self) -> float:
        return self.enrichment.total_code_bytes / 1024 if self.enrichment else 0.0

    @property
    def scripts(self) -> list[str]:
        if self.enrichment and self.enrichment.package_json:
            return self.enrichment.package_json.scripts
        return []

    def has_script(self, keyword: str) -> bool:
        return any(keyword in script for script in self.scripts)


Condition = Callable[[ScoringContext], bool]


@dataclass(frozen=True)
class ScoreRule:
    """이름 있는 점수 규칙, 처음 만족하는 단계의 점수만 더한다"""

    name: str
    tiers: tuple[tuple[Condition, int], ...]

    def evaluate(self, ctx: ScoringContext) -> int:
        for condition, delta in self.tiers:
            if condition(ctx):
                return delta
        return 0


def _rule(name: str, condition: Condition, delta: int) -> ScoreRule:
    return ScoreRule(name, ((condition, delta),))


def _above(metric: Callable[[ScoringContext], float], tiers: list[tuple[float, int]]):
    return tuple((lambda c, t=threshold: metric(c) > t, delta) for threshold, delta in tiers)


def _at_least(metric: Callable[[ScoringContext], float], tiers: list[tuple[float, int]]):
    return tuple((lambda c, t=threshold: metric(c) >= t, delta) for threshold, delta in tiers)


def _below(metric: Callable[[ScoringContext], float], tiers: list[tuple[float, int]]):
    return tuple((lambda c, t=threshold: metric(c) < t, delta) for threshold, delta in tiers)


# 분석 데이터가 없을 때의 기본 규칙
FALLBACK_RULES: tuple[ScoreRule, ...] = (
    _rule("public_stars", lambda c: c.is_public and c.stars > 10, 30),
    _rule("forks", lambda c: c.forks > 5, 20),
    _rule("recent_update", lambda c: c.days_since_update < 90, 10),
    _rule("ownership", lambda c: c.is_owned, 20),
    _rule("fork_penalty", lambda c: c.is_fork, -200),
)

# 기여도 게이트: 조직 레포와 본인 fork에만 적용, SENTINEL_SCORE는 즉시 제거
CONTRIBUTION_GATES: tuple[ScoreRule, ...] = (
    ScoreRule(
        "external_contribution",
        (
            (lambda c: not c.is_owned and c.user_commits == 0, SENTINEL_SCORE),
            (lambda c: not c.is_owned and c.user_commits < 3, -300),
            (
                lambda c: not c.is_owned and (c.user_commits < 10 or c.contribution_ratio <= 0.1),
                -200,
            ),
            (
                lambda c: not c.is_owned and (c.user_commits < 20 or c.contribution_ratio < 0.25),
                -100,
            ),
        ),
    ),
    ScoreRule(
        "own_fork_contribution",
        (
            (lambda c: c.is_owned and c.is_fork and c.user_commits == 0, SENTINEL_SCORE),
            (lambda c: c.is_owned and c.is_fork and c.user_commits < 10, -250),
            (lambda c: c.is_owned and c.is_fork and c.user_commits < 30, -150),
        ),
    ),
)

SIGNAL_RULES: tuple[ScoreRule, ...] = (
    ScoreRule(
        "commits",
        _above(
            lambda c: c.relevant_commits,
            [(500, 100), (200, 80), (100, 60), (50, 40), (20, 20), (5, 10)],
        ),
    ),
    ScoreRule(
        "code_size",
        _above(lambda c: c.code_kb, [(1000, 50), (500, 40), (200, 30), (100, 20), (50, 10)]),
    ),
    ScoreRule(
        "language_diversity",
        _at_least(lambda c: c.enrichment.language_count, [(5, 30), (3, 20), (2, 10)]),
    ),
    ScoreRule(
        "readme_length",
        _above(
            lambda c: c.enrichment.readme.length,
            [(5000, 40), (2000, 30), (1000, 20), (500, 10)],
        ),
    ),
    ScoreRule(
        "complexity",
        (
            (lambda c: c.enrichment.readme.complexity == "complex", 50),
            (lambda c: c.enrichment.readme.complexity == "moderate", 25),
        ),
    ),
    _rule("test_script", lambda c: c.has_script("test"), 20),
    _rule("build_script", lambda c: c.has_script("build"), 15),
    _rule("lint_script", lambda c: c.has_script("lint"), 10),
    _rule("docs", lambda c: c.enrichment.readme.has_docs, 15),
    _rule("demo", lambda c: c.enrichment.readme.has_demo, 20),
    _rule("metrics", lambda c: c.enrichment.readme.has_metrics, 15),
    ScoreRule(
        "technologies",
        _above(
            lambda c: len(c.enrichment.detected_technologies), [(30, 30), (20, 20), (10, 10)]
        ),
    ),
    ScoreRule(
        "recency",
        _below(lambda c: c.days_since_update, [(30, 30), (90, 20), (180, 10)]),
    ),
    ScoreRule(
        "public_stars",
        _above(
            lambda c: c.stars if c.is_public else 0,
            [(100, 50), (50, 40), (20, 30), (10, 20), (5, 10)],
        ),
    ),
    ScoreRule(
        "public_forks",
        _above(lambda c: c.forks if c.is_public else 0, [(20, 30), (10, 20), (5, 10)]),
    ),
    _rule("ownership", lambda c: c.is_owned, 30),
)

# 게이트에서 이미 처리한 조직 레포/fork에는 중복 적용하지 않는다
PENALTY_RULES: tuple[ScoreRule, ...] = (
    _rule("empty_readme", lambda c: c.enrichment.readme.length == 0, -20),
    _rule(
        "trivial_own_repo",
        lambda c: c.is_owned and not c.is_fork and c.relevant_commits < 5,
        -20,
    ),
)


def _days_since(timestamp: str | None, now: datetime) -> float:
    """ISO 8601 시각으로부터 지난 일수, 파싱 불가면 무한대"""
    if not timestamp:
        return math.inf
    try:
        updated = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return math.inf
    if updated.tzinfo is None:
        updated = updated.replace(tzinfo=timezone.utc)
    return (now - updated).total_seconds() / SECONDS_PER_DAY


def contribution_ratio(user_commits: int, total_commits: int) -> float:
    """사용자 커밋 비율, 1.0을 넘지 않음

    전체 커밋이 0인데 사용자 커밋이 있으면 집계 불일치로 보고 1.0
    """
    if total_commits > 0 and user_commits >= 0:
        return min(user_commits / total_commits, 1.0)
    if total_commits == 0 and user_commits > 0:
        return 1.0
    return 0.0


def _apply(rules: tuple[ScoreRule, ...], ctx: ScoringContext) -> int:
    return sum(rule.evaluate(ctx) for rule in rules)


def calculate_score(scored: ScoredRepository, username: str, now: datetime) -> int:
    """단일 레포지토리 점수 계산

    분석 데이터가 없으면 기본 규칙만 적용하고 0 이상으로 보정한다.
    분석 데이터가 있으면 음수 점수를 그대로 유지한다.
    """
    repository = scored.repository
    if repository.owner_name is None:
        logger.warning("잘못된 레포 이름 형식", full_name=repository.full_name)
        return 0

    is_owned = repository.is_owned_by(username)
    days_since_update = _days_since(repository.updated_at, now)
    data = scored.enrichment

    if data is None:
        ctx = ScoringContext(repository, None, is_owned, days_since_update)
        return max(0, _apply(FALLBACK_RULES, ctx))

    ctx = ScoringContext(
        repository=repository,
        enrichment=data,
        is_owned=is_owned,
        days_since_update=days_since_update,
        user_commits=data.user_commit_count,
        total_commits=data.commit_count,
        contribution_ratio=contribution_ratio(data.user_commit_count, data.commit_count),
    )

    score = 0
    for gate in CONTRIBUTION_GATES:
        delta = gate.evaluate(ctx)
        if delta == SENTINEL_SCORE:
            return SENTINEL_SCORE
        score += delta

    return score + _apply(SIGNAL_RULES, ctx) + _apply(PENALTY_RULES, ctx)


def _is_kept(scored: ScoredRepository, username: str) -> bool:
    if scored.score < REMOVAL_THRESHOLD:
        return False
    return scored.score > 0 or (scored.score >= 0 and scored.repository.is_owned_by(username))


def score_repositories(
    repositories: list[ScoredRepository],
    username: str,
    now: datetime | None = None,
) -> list[ScoredRepository]:
    """레포지토리 점수 계산 후 필터링 및 정렬

    점수 -1000 미만은 제거하고, 양수이거나 본인 소유이면서 0 이상인 레포만 남긴다.
    점수 내림차순으로 정렬하며 동점은 입력 순서를 유지한다.

    Args:
        repositories: 분석된 레포지토리 목록
        username: GitHub 유저네임
        now: 최근성 계산 기준 시각, 기본 현재 UTC

    Returns:
        점수가 갱신된 새 레포지토리 목록
    """
    now = now or datetime.now(timezone.utc)

    scored = [
        repo.model_copy(update={"score": calculate_score(repo, username, now)})
        for repo in repositories
    ]
    kept = [repo for repo in scored if _is_kept(repo, username)]
    ranked = sorted(kept, key=lambda repo: repo.score, reverse=True)

    logger.info("레포 점수 계산 완료", total=len(scored), kept=len(ranked))
    return ranked
