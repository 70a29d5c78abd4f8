import json
import re
from functools import wraps
from typing import Callable, Iterable

from app.core.logging import get_logger
from app.domain.repository.constants import (
    DATA_SCIENCE_LIBRARIES,
    MAX_DEPENDENCIES,
    MAX_NAME_LENGTH,
    MAX_PACKAGE_DEPENDENCIES,
    MAX_PACKAGE_DESCRIPTION,
    MAX_PACKAGE_SCRIPTS,
    ML_LIBRARIES,
)
from app.domain.repository.schemas import NotebookAnalysis, PackageManifest

logger = get_logger(__name__)

KB = 1000

REQUIREMENTS_MAX_LINES = 500
REQUIREMENTS_MAX_LINE_LENGTH = 200
REQUIREMENTS_MAX_NAME_LENGTH = 100

GO_REQUIRE_PATTERN = re.compile(r"^\s*(?:require\s+)?([a-zA-Z0-9._/-]+)\s+v")
GO_MAJOR_VERSION_PATTERN = re.compile(r"^v\d+$")
TOML_KEY_PATTERN = re.compile(r"^([a-zA-Z0-9_-]+)\s*=")
POM_ARTIFACT_PATTERN = re.compile(r"<artifactId>([^<]+)</artifactId>")
GRADLE_DEPENDENCY_PATTERN = re.compile(
    r"(?:implementation|compile|api|testImplementation)\s*\(?\s*['\"]([^'\"():]+):([^'\"():]+)"
)
GEM_PATTERN = re.compile(r"^\s*gem\s+['\"]([a-zA-Z0-9_-]+)['\"]")
CMAKE_FIND_PACKAGE_PATTERN = re.compile(r"find_package\s*\(\s*([a-zA-Z0-9_]+)", re.IGNORECASE)
SETUP_REQUIRES_PATTERN = re.compile(r"install_requires\s*=\s*\[(.*?)\]", re.DOTALL)
QUOTED_NAME_PATTERN = re.compile(r"['\"]([a-zA-Z0-9_-]+)")
# 따옴표 안의 extras 대괄호는 배열 끝으로 보지 않음
PYPROJECT_ARRAY_PATTERN = re.compile(
    r"""dependencies\s*=\s*\[((?:[^\]"']|"[^"]*"|'[^']*')*)\]"""
)
PYTHON_NAME_PATTERN = re.compile(r"^([A-Za-z0-9][A-Za-z0-9._-]*)")
NOTEBOOK_IMPORT_PATTERN = re.compile(r"(?:import|from)\s+([a-zA-Z0-9_]+)")


def _log_parser_result(filename: str) -> Callable:
    """파서 완료 로깅 데코레이터"""

    def decorator(func):
        @wraps(func)
        def wrapper(content: str):
            result = func(content)
            if isinstance(result, list):
                logger.debug(f"{filename} 파싱 완료", deps=len(result))
            return result

        return wrapper

    return decorator


def unique(items: Iterable[str], limit: int = MAX_DEPENDENCIES) -> list[str]:
    """순서를 유지하며 중복 제거 후 limit개로 자름"""
    return list(dict.fromkeys(items))[:limit]


def _too_large(content: str, max_length: int) -> bool:
    return not content or len(content) > max_length


def _valid_name(name: str | None, max_length: int = MAX_NAME_LENGTH) -> bool:
    return bool(name) and len(name) < max_length


def parse_package_json(content: str) -> PackageManifest | None:
    """package.json에서 dependencies, scripts, description 추출

    JSON 객체가 아니거나 500KB를 넘으면 None
    """
    if _too_large(content, 500 * KB):
        return None

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.info("package.json 파싱 실패", error=str(e))
        return None

    if not isinstance(data, dict):
        return None

    def _keys(field: str) -> list[str]:
        value = data.get(field)
        return [str(k) for k in value] if isinstance(value, dict) else []

    description = data.get("description")
    manifest = PackageManifest(
        dependencies=unique(_keys("dependencies"), MAX_PACKAGE_DEPENDENCIES),
        dev_dependencies=unique(_keys("devDependencies"), MAX_PACKAGE_DEPENDENCIES),
        scripts=unique(_keys("scripts"), MAX_PACKAGE_SCRIPTS),
        description=description[:MAX_PACKAGE_DESCRIPTION] if isinstance(description, str) else None,
    )
    logger.debug(
        "package.json 파싱 완료",
        deps=len(manifest.dependencies),
        dev=len(manifest.dev_dependencies),
    )
    return manifest


@_log_parser_result("requirements.txt")
def parse_requirements_txt(content: str) -> list[str]:
    """requirements.txt에서 패키지 이름 추출"""
    if _too_large(content, 100 * KB):
        return []

    deps = []
    for line in content.split("\n")[:REQUIREMENTS_MAX_LINES]:
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("-"):
            continue
        if len(line) >= REQUIREMENTS_MAX_LINE_LENGTH:
            continue
        match = PYTHON_NAME_PATTERN.match(line)
        if match and _valid_name(match.group(1), REQUIREMENTS_MAX_NAME_LENGTH):
            deps.append(match.group(1))

    return unique(deps)


@_log_parser_result("go.mod")
def parse_go_mod(content: str) -> list[str]:
    """go.mod에서 require 모듈 이름 추출

    모듈 경로의 마지막 세그먼트를 사용하며, v2 같은 메이저 버전 접미사는 건너뛴다.
    """
    if _too_large(content, 100 * KB):
        return []

    deps = []
    for line in content.split("\n"):
        match = GO_REQUIRE_PATTERN.match(line)
        if not match:
            continue
        segments = [s for s in match.group(1).split("/") if s]
        if len(segments) > 1 and GO_MAJOR_VERSION_PATTERN.match(segments[-1]):
            segments.pop()
        name = segments[-1] if segments else ""
        if _valid_name(name):
            deps.append(name)

    return unique(deps)


@_log_parser_result("Cargo.toml")
def parse_cargo_toml(content: str) -> list[str]:
    """Cargo.toml의 dependency 테이블에서 crate 이름 추출"""
    if _too_large(content, 100 * KB):
        return []

    deps = []
    in_deps = False
    for line in content.split("\n"):
        header = line.strip()
        if header in ("[dependencies]", "[dev-dependencies]", "[build-dependencies]"):
            in_deps = True
            continue
        if header.startswith("["):
            in_deps = False
            continue
        if in_deps:
            match = TOML_KEY_PATTERN.match(header)
            if match and _valid_name(match.group(1)):
                deps.append(match.group(1))

    return unique(deps)


@_log_parser_result("pom.xml")
def parse_pom_xml(content: str) -> list[str]:
    """pom.xml에서 artifactId 추출, 변수 치환과 parent 아티팩트는 제외"""
    if _too_large(content, 500 * KB):
        return []

    deps = [
        artifact
        for artifact in POM_ARTIFACT_PATTERN.findall(content)
        if _valid_name(artifact) and "$" not in artifact and not artifact.endswith("-parent")
    ]
    return unique(deps)


@_log_parser_result("build.gradle")
def parse_build_gradle(content: str) -> list[str]:
    """build.gradle에서 group:artifact:version의 artifact 추출"""
    if _too_large(content, 200 * KB):
        return []

    deps = [
        artifact
        for _, artifact in GRADLE_DEPENDENCY_PATTERN.findall(content)
        if _valid_name(artifact)
    ]
    return unique(deps)


@_log_parser_result("Gemfile")
def parse_gemfile(content: str) -> list[str]:
    """Gemfile에서 gem 이름 추출"""
    if _too_large(content, 100 * KB):
        return []

    deps = []
    for line in content.split("\n"):
        match = GEM_PATTERN.match(line)
        if match and _valid_name(match.group(1)):
            deps.append(match.group(1))

    return unique(deps)


@_log_parser_result("CMakeLists.txt")
def parse_cmake_lists(content: str) -> list[str]:
    """CMakeLists.txt에서 find_package 대상 추출"""
    if _too_large(content, 200 * KB):
        return []

    deps = [name for name in CMAKE_FIND_PACKAGE_PATTERN.findall(content) if _valid_name(name)]
    return unique(deps)


@_log_parser_result("setup.py")
def parse_setup_py(content: str) -> list[str]:
    """setup.py의 install_requires에서 패키지 이름 추출"""
    if _too_large(content, 100 * KB):
        return []

    match = SETUP_REQUIRES_PATTERN.search(content)
    if not match:
        return []

    deps = [name for name in QUOTED_NAME_PATTERN.findall(match.group(1)) if _valid_name(name)]
    return unique(deps)


@_log_parser_result("pyproject.toml")
def parse_pyproject_toml(content: str) -> list[str]:
    """pyproject.toml에서 dependencies 추출

    PEP 621 배열과 Poetry 테이블 형식을 모두 지원
    """
    if _too_large(content, 100 * KB):
        return []

    deps = []
    in_deps = False
    for line in content.split("\n"):
        stripped = line.strip()
        if stripped in ("[project.dependencies]", "[tool.poetry.dependencies]"):
            in_deps = True
            continue
        if stripped.startswith("["):
            in_deps = False
            continue
        if in_deps:
            match = TOML_KEY_PATTERN.match(stripped)
            if match and match.group(1) != "python" and _valid_name(match.group(1)):
                deps.append(match.group(1))

    for block in PYPROJECT_ARRAY_PATTERN.findall(content):
        for requirement in re.findall(r"[\"']([^\"']+)[\"']", block):
            match = PYTHON_NAME_PATTERN.match(requirement.strip())
            if match and len(match.group(1)) > 1 and _valid_name(match.group(1)):
                deps.append(match.group(1))

    return unique(deps)


def parse_jupyter_notebook(content: str) -> NotebookAnalysis:
    """노트북 코드 셀의 import를 추출하고 ML/데이터 사이언스 여부 판단

    두 분류는 서로 배타적이지 않다.
    """
    if _too_large(content, 5000 * KB):
        return NotebookAnalysis()

    try:
        notebook = json.loads(content)
    except json.JSONDecodeError:
        logger.info("노트북 파싱 실패")
        return NotebookAnalysis()

    if not isinstance(notebook, dict) or not isinstance(notebook.get("cells"), list):
        return NotebookAnalysis()

    imports = []
    for cell in notebook["cells"]:
        if not isinstance(cell, dict) or cell.get("cell_type") != "code":
            continue
        source = cell.get("source") or ""
        if isinstance(source, list):
            source = "".join(s for s in source if isinstance(s, str))
        if not isinstance(source, str):
            continue
        imports.extend(m for m in NOTEBOOK_IMPORT_PATTERN.findall(source) if _valid_name(m))

    roots = list(dict.fromkeys(imports))
    lowered = {name.lower() for name in roots}
    return NotebookAnalysis(
        imports=roots[:MAX_DEPENDENCIES],
        is_ml=not lowered.isdisjoint(ML_LIBRARIES),
        is_data_science=not lowered.isdisjoint(DATA_SCIENCE_LIBRARIES),
    )


PARSERS: dict[str, Callable[[str], list[str]]] = {
    "requirements.txt": parse_requirements_txt,
    "go.mod": parse_go_mod,
    "Cargo.toml": parse_cargo_toml,
    "pom.xml": parse_pom_xml,
    "build.gradle": parse_build_gradle,
    "Gemfile": parse_gemfile,
    "CMakeLists.txt": parse_cmake_lists,
    "setup.py": parse_setup_py,
    "pyproject.toml": parse_pyproject_toml,
}


def parse_dependency_file(filename: str, content: str) -> list[str]:
    """파일 이름에 따라 적절한 파서 호출

    Args:
        filename: 의존성 파일 이름
        content: 파일 내용

    Returns:
        의존성 이름 목록, 지원하지 않는 파일이면 빈 리스트
    """
    parser = PARSERS.get(filename)
    if parser:
        return parser(content)

    return []
