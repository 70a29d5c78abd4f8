"""README 휴리스틱 분석

정규식 기반으로 프로젝트 유형, 복잡도, 데모/문서/지표 여부와 기술 키워드를 추출한다.
"""

import re

from app.core.config import settings
from app.domain.repository.constants import (
    MAX_NAME_LENGTH,
    MAX_README_MENTIONS,
    PROJECT_TYPE_RULES,
    README_TECH_VOCABULARY,
)
from app.domain.repository.schemas import ReadmeAnalysis

_PROJECT_TYPE_PATTERNS = [(name, re.compile(pattern)) for name, pattern in PROJECT_TYPE_RULES]

DEMO_PATTERN = re.compile(r"demo|live|deployed|website|app\.|production")
DOCS_PATTERN = re.compile(r"documentation|docs|api reference|wiki")
METRICS_PATTERN = re.compile(
    r"\d+\+?\s*(users|requests|downloads|stars|contributors|companies)", re.IGNORECASE
)
IMAGE_PATTERN = re.compile(r"!\[.*\]\(.*\)")
SECTION_PATTERN = re.compile(r"^#{2,3}\s", re.MULTILINE)
TECH_PATTERN = re.compile(rf"\b({README_TECH_VOCABULARY})\b", re.IGNORECASE)

MODERATE_WORDS = 500
COMPLEX_WORDS = 1500
MODERATE_SECTIONS = 5
COMPLEX_SECTIONS = 10


def _detect_project_type(lower: str) -> str:
    project_type = "application"
    for name, pattern in _PROJECT_TYPE_PATTERNS:
        if pattern.search(lower):
            project_type = name
    return project_type


def _estimate_complexity(content: str) -> str:
    word_count = len(content.split())
    section_count = len(SECTION_PATTERN.findall(content))
    has_images = IMAGE_PATTERN.search(content) is not None

    if word_count > COMPLEX_WORDS or section_count > COMPLEX_SECTIONS or has_images:
        return "complex"
    if word_count > MODERATE_WORDS or section_count > MODERATE_SECTIONS:
        return "moderate"
    return "simple"


def _extract_mentions(content: str) -> list[str]:
    mentions = (m.lower() for m in TECH_PATTERN.findall(content))
    filtered = (m for m in mentions if 1 < len(m) < MAX_NAME_LENGTH)
    return list(dict.fromkeys(filtered))[:MAX_README_MENTIONS]


def analyze_readme(content: str | None) -> ReadmeAnalysis:
    """README 내용 분석

    Args:
        content: README 원문

    Returns:
        README 분석 결과, 내용이 없으면 기본값
    """
    if not content:
        return ReadmeAnalysis()

    truncated = content[: settings.readme_max_parse_length]
    lower = truncated.lower()

    return ReadmeAnalysis(
        project_type=_detect_project_type(lower),
        has_demo=DEMO_PATTERN.search(lower) is not None,
        has_docs=DOCS_PATTERN.search(lower) is not None,
        has_metrics=METRICS_PATTERN.search(truncated) is not None,
        complexity=_estimate_complexity(truncated),
        mentions=_extract_mentions(truncated),
    )
