import asyncio
from dataclasses import dataclass
from typing import Callable

from app.core.config import settings
from app.core.logging import get_logger
from app.domain.repository.constants import MAX_DEPENDENCIES, MAX_DETECTED_TECHNOLOGIES
from app.domain.repository.parsers import (
    parse_build_gradle,
    parse_cargo_toml,
    parse_cmake_lists,
    parse_gemfile,
    parse_go_mod,
    parse_jupyter_notebook,
    parse_package_json,
    parse_pom_xml,
    parse_pyproject_toml,
    parse_requirements_txt,
    parse_setup_py,
    unique,
)
from app.domain.repository.readme import analyze_readme
from app.domain.repository.schemas import (
    EnrichmentRecord,
    NotebookAnalysis,
    ReadmeSummary,
    RepositorySummary,
    ScoredRepository,
)
from app.infra.github.client import (
    fetch_contributor_aggregate,
    fetch_file_content,
    fetch_languages,
)

logger = get_logger(__name__)

README_PATHS = ("README.md", "readme.md")
NOTEBOOK_ECOSYSTEM = "notebook"
PYTHON_ECOSYSTEM = "python"


@dataclass(frozen=True)
class ManifestSource:
    """언어별로 추가 조회할 매니페스트 파일"""

    path: str
    ecosystem: str
    parser: Callable[[str], list[str]] | None = None
    notebook: bool = False

    @property
    def max_size_bytes(self) -> int:
        if self.notebook:
            return settings.github_notebook_max_bytes
        return settings.github_file_max_bytes


_SETUP_PY = ManifestSource("setup.py", PYTHON_ECOSYSTEM, parse_setup_py)
_PYPROJECT = ManifestSource("pyproject.toml", PYTHON_ECOSYSTEM, parse_pyproject_toml)
_CMAKE = ManifestSource("CMakeLists.txt", "cpp", parse_cmake_lists)

# 감지된 언어(소문자) -> 추가 조회할 파일
LANGUAGE_MANIFESTS: dict[str, tuple[ManifestSource, ...]] = {
    "go": (ManifestSource("go.mod", "go", parse_go_mod),),
    "rust": (ManifestSource("Cargo.toml", "rust", parse_cargo_toml),),
    "java": (
        ManifestSource("pom.xml", "java", parse_pom_xml),
        ManifestSource("build.gradle", "java", parse_build_gradle),
    ),
    "ruby": (ManifestSource("Gemfile", "ruby", parse_gemfile),),
    "c": (_CMAKE,),
    "c++": (_CMAKE,),
    "cmake": (_CMAKE,),
    "python": (_SETUP_PY, _PYPROJECT),
    "jupyter notebook": (
        _SETUP_PY,
        _PYPROJECT,
        ManifestSource("main.ipynb", NOTEBOOK_ECOSYSTEM, notebook=True),
        ManifestSource("notebook.ipynb", NOTEBOOK_ECOSYSTEM, notebook=True),
    ),
}


def select_manifest_sources(languages: dict[str, int]) -> list[ManifestSource]:
    """감지된 언어에 해당하는 매니페스트 목록, 같은 경로는 한 번만 포함"""
    sources: dict[str, ManifestSource] = {}
    for language in languages:
        for source in LANGUAGE_MANIFESTS.get(language.lower(), ()):
            sources.setdefault(source.path, source)
    return list(sources.values())


async def _fetch_manifests(
    token: str, owner: str, repo: str, sources: list[ManifestSource]
) -> list[tuple[ManifestSource, str | None]]:
    contents = await asyncio.gather(
        *[
            fetch_file_content(token, owner, repo, source.path, max_size_bytes=source.max_size_bytes)
            for source in sources
        ]
    )
    return list(zip(sources, contents, strict=True))


def _build_readme_summary(readme_content: str, notebook: NotebookAnalysis) -> ReadmeSummary:
    analysis = analyze_readme(readme_content)

    project_type = analysis.project_type
    if notebook.is_ml:
        project_type = "ml-project"
    elif notebook.is_data_science:
        project_type = "data-science"

    return ReadmeSummary(
        length=len(readme_content),
        has_demo=analysis.has_demo,
        has_docs=analysis.has_docs,
        tech_mentions=analysis.mentions,
        project_type=project_type,
        has_metrics=analysis.has_metrics,
        complexity=analysis.complexity,
    )


async def enrich_repository(
    token: str, repository: RepositorySummary, username: str
) -> EnrichmentRecord | None:
    """단일 레포지토리 심층 분석

    1차로 공통 파일, 커밋 집계, 언어 정보를 병렬 조회하고
    감지된 언어에 따라 생태계별 매니페스트를 2차로 병렬 조회한다.

    Args:
        token: GitHub 토큰
        repository: 분석할 레포지토리
        username: 기여도를 집계할 GitHub 유저네임

    Returns:
        분석 결과, full_name 형식이 잘못되면 None
    """
    owner, repo = repository.owner_name, repository.repo_name
    if owner is None or repo is None:
        logger.warning("잘못된 레포 이름 형식", full_name=repository.full_name)
        return None

    package_raw, requirements_raw, readme_upper, readme_lower, commits, languages = (
        await asyncio.gather(
            fetch_file_content(token, owner, repo, "package.json"),
            fetch_file_content(token, owner, repo, "requirements.txt"),
            fetch_file_content(token, owner, repo, README_PATHS[0]),
            fetch_file_content(token, owner, repo, README_PATHS[1]),
            fetch_contributor_aggregate(token, owner, repo, username),
            fetch_languages(token, owner, repo),
        )
    )

    manifests = await _fetch_manifests(token, owner, repo, select_manifest_sources(languages))

    package_json = parse_package_json(package_raw) if package_raw else None
    requirements = parse_requirements_txt(requirements_raw) if requirements_raw else []

    ecosystem_lists: dict[str, list[str]] = {}
    notebook = NotebookAnalysis()
    notebook_found = False
    for source, content in manifests:
        if not content:
            continue
        if source.notebook:
            if not notebook_found:
                notebook = parse_jupyter_notebook(content)
                notebook_found = True
            continue
        ecosystem_lists.setdefault(source.ecosystem, []).extend(source.parser(content))

    python_dependencies = unique(requirements + ecosystem_lists.pop(PYTHON_ECOSYSTEM, []))
    ecosystem_dependencies = {
        ecosystem: unique(deps, MAX_DEPENDENCIES) for ecosystem, deps in ecosystem_lists.items()
    }

    readme_content = readme_upper or readme_lower or ""
    readme = _build_readme_summary(readme_content, notebook)

    technologies: list[str] = []
    if package_json:
        technologies += package_json.dependencies + package_json.dev_dependencies
    technologies += python_dependencies
    for deps in ecosystem_dependencies.values():
        technologies += deps
    technologies += notebook.imports
    technologies += readme.tech_mentions

    return EnrichmentRecord(
        package_json=package_json,
        python_dependencies=python_dependencies,
        ecosystem_dependencies=ecosystem_dependencies,
        notebook_imports=notebook.imports,
        commit_count=commits.total,
        user_commit_count=commits.user_contributions,
        languages=languages,
        language_count=len(languages),
        total_code_bytes=sum(languages.values()),
        readme=readme,
        is_ml_project=notebook.is_ml,
        is_data_science=notebook.is_data_science,
        detected_technologies=unique(technologies, MAX_DETECTED_TECHNOLOGIES),
    )


async def enrich_repositories(
    token: str,
    repositories: list[RepositorySummary],
    username: str,
    limit: int | None = None,
) -> list[ScoredRepository]:
    """상위 레포지토리들을 병렬로 심층 분석

    호출자가 미리 정렬한 목록의 앞 limit개만 분석한다.
    레포 하나의 실패는 해당 레포만 분석 데이터 없이 반환하고 전체를 중단하지 않는다.

    Args:
        token: GitHub 토큰
        repositories: 정렬된 레포지토리 목록
        username: GitHub 유저네임
        limit: 분석할 최대 레포 수, 기본 settings.enrichment_limit

    Returns:
        점수 계산 전의 레포지토리 목록
    """
    limit = settings.enrichment_limit if limit is None else limit
    targets = repositories[:limit]

    async def _enrich(repository: RepositorySummary) -> ScoredRepository:
        try:
            enrichment = await enrich_repository(token, repository, username)
        except Exception as e:
            logger.warning(
                "레포 분석 실패", full_name=repository.full_name, error=type(e).__name__
            )
            enrichment = None
        return ScoredRepository(repository=repository, enrichment=enrichment)

    results = await asyncio.gather(*[_enrich(repository) for repository in targets])

    enriched = sum(1 for r in results if r.enrichment is not None)
    logger.info("레포 분석 완료", total=len(results), enriched=enriched)
    return list(results)
