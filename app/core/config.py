from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정"""

    environment: str = "development"

    # GitHub API
    github_api_base: str = "https://api.github.com"

    # Timeout 설정 (초)
    github_timeout: float = 30.0
    github_file_timeout: float = 5.0
    github_commit_timeout: float = 10.0

    # 파일 크기 제한 (바이트)
    github_file_max_bytes: int = 1024 * 1024
    github_notebook_max_bytes: int = 5 * 1024 * 1024

    # 페이지네이션 설정
    github_repos_per_page: int = 100
    github_max_pages: int = 3
    github_contributor_max_pages: int = 3

    # 분석 대상 레포 개수
    enrichment_limit: int = 20

    # README 설정
    readme_max_parse_length: int = 50000

    # 로깅 설정
    log_level: str = "INFO"

    # 요청 제한
    rate_limit: str = "10/minute"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
