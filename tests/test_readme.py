"""README 분석 테스트"""

import pytest

from app.domain.repository.readme import analyze_readme


class TestAnalyzeReadme:
    """README 분석 테스트"""

    @pytest.mark.parametrize("content", [None, ""])
    def test_empty_readme(self, content):
        """내용이 없으면 기본값"""
        result = analyze_readme(content)

        assert result.project_type == "application"
        assert result.complexity == "simple"
        assert result.has_demo is False
        assert result.mentions == []

    def test_long_readme_with_many_sections_is_complex(self):
        """1800단어, H2 12개면 complex"""
        content = "## Section\n" * 12 + "word " * 1800
        assert analyze_readme(content).complexity == "complex"

    def test_image_forces_complex(self):
        """이미지가 있으면 짧아도 complex"""
        assert analyze_readme("# Title\n![screenshot](docs/shot.png)").complexity == "complex"

    @pytest.mark.parametrize(
        "content, expected",
        [
            ("word " * 600, "moderate"),
            ("## A\n## B\n## C\n## D\n## E\n## F\n", "moderate"),
            ("word " * 100, "simple"),
        ],
    )
    def test_complexity_thresholds(self, content, expected):
        """단어 수와 섹션 수 기준 복잡도"""
        assert analyze_readme(content).complexity == expected

    def test_project_type_last_match_wins(self):
        """여러 유형이 일치하면 뒤의 규칙이 우선"""
        content = "A small library exposing a backend with an admin dashboard"
        assert analyze_readme(content).project_type == "dashboard"

    @pytest.mark.parametrize(
        "content, expected",
        [
            ("Published on PyPI", "library"),
            ("A command-line helper", "cli-tool"),
            ("Android client", "mobile-app"),
            ("My personal portfolio", "website"),
            ("Just a toy", "application"),
        ],
    )
    def test_project_type(self, content, expected):
        """키워드별 프로젝트 유형"""
        assert analyze_readme(content).project_type == expected

    def test_flags(self):
        """데모, 문서, 지표 감지"""
        content = "Try the live demo. See the documentation. Trusted by 500+ companies."
        result = analyze_readme(content)

        assert result.has_demo is True
        assert result.has_docs is True
        assert result.has_metrics is True

    def test_mentions_are_lowercased_and_deduplicated(self):
        """기술 키워드는 소문자로 중복 없이"""
        content = "Built with React and react hooks, FastAPI, Docker. Data in PostgreSQL."
        assert analyze_readme(content).mentions == ["react", "fastapi", "docker", "postgresql"]

    def test_mentions_respect_word_boundary(self):
        """단어 일부는 키워드로 보지 않음"""
        assert analyze_readme("reactive gopher").mentions == []

    def test_truncates_long_readme(self):
        """분석 길이 상한 이후 내용은 무시"""
        content = "word " * 10_000 + "dashboard"
        assert analyze_readme(content).project_type == "application"
