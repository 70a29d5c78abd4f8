"""이력서 생성 LLM에 전달할 레포지토리 컨텍스트 구성"""

from datetime import datetime

from app.domain.repository.schemas import RepositorySummary, ScoredRepository

TOP_TECHNOLOGIES = 20
MAX_CONTEXT_REPOSITORIES = 50

# 별 하나를 최근성 2주로 환산
STAR_WEIGHT_SECONDS = 7 * 24 * 60 * 60 * 2


def _updated_timestamp(repository: RepositorySummary) -> float:
    if not repository.updated_at:
        return 0.0
    try:
        return datetime.fromisoformat(repository.updated_at.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0


def select_context_repositories(
    repositories: list[RepositorySummary],
    limit: int = MAX_CONTEXT_REPOSITORIES,
) -> list[dict]:
    """최근성과 별 수를 합산해 상위 레포를 골라 요약 dict로 변환"""

    def _sort_key(repository: RepositorySummary) -> float:
        return _updated_timestamp(repository) + repository.stargazers_count * STAR_WEIGHT_SECONDS

    selected = sorted(repositories, key=_sort_key, reverse=True)[:limit]
    return [
        {
            "name": r.name,
            "desc": r.description,
            "lang": r.language,
            "topics": r.topics,
            "stars": r.stargazers_count,
            "updated": r.updated_at.split("T")[0] if r.updated_at and "T" in r.updated_at else "unknown",
            "isFork": r.fork,
            "url": r.html_url,
        }
        for r in selected
    ]


def build_repository_context(repositories: list[ScoredRepository]) -> list[dict]:
    """점수 계산된 레포를 LLM 프롬프트용 dict로 변환"""
    context = []
    for scored in repositories:
        repository = scored.repository
        entry = {
            "name": repository.name,
            "url": repository.html_url,
            "homepage": repository.homepage,
            "isPrivate": repository.private,
            "stars": repository.stargazers_count,
            "score": scored.score,
        }

        data = scored.enrichment
        if data is not None:
            scripts = data.package_json.scripts if data.package_json else []
            entry.update(
                {
                    "commits": data.commit_count,
                    "userCommits": data.user_commit_count,
                    "codeSize": data.total_code_bytes,
                    "languageCount": data.language_count,
                    "packageDescription": data.package_json.description if data.package_json else None,
                    "dependencies": data.detected_technologies[:TOP_TECHNOLOGIES],
                    "hasTests": any("test" in s for s in scripts),
                    "hasBuild": any("build" in s for s in scripts),
                    "hasLint": any("lint" in s for s in scripts),
                    "hasDemo": data.readme.has_demo,
                    "hasDocs": data.readme.has_docs,
                    "hasMetrics": data.readme.has_metrics,
                    "projectType": data.readme.project_type,
                    "complexity": data.readme.complexity,
                    "readmeLength": data.readme.length,
                    "techStack": data.readme.tech_mentions,
                    "isMLProject": data.is_ml_project,
                    "isDataScience": data.is_data_science,
                }
            )
        context.append(entry)
    return context
