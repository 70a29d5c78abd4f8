"""레포지토리 분석용 상수

매니페스트 파서, README 분석기, 점수 계산기가 공유하는 키워드 목록과 상한값
"""

# 노트북 import 기반 분류 (대소문자 무시, 정확히 일치)
ML_LIBRARIES = frozenset(
    [
        "tensorflow",
        "torch",
        "pytorch",
        "keras",
        "sklearn",
        "xgboost",
        "lightgbm",
        "transformers",
        "huggingface",
    ]
)

DATA_SCIENCE_LIBRARIES = frozenset(
    [
        "pandas",
        "numpy",
        "matplotlib",
        "seaborn",
        "plotly",
        "scipy",
        "statsmodels",
    ]
)

# README 기술 키워드
README_TECH_VOCABULARY = (
    r"react|vue|angular|svelte|next\.?js|nuxt|node\.?js|express|koa|fastify"
    r"|django|flask|fastapi|spring|laravel|rails"
    r"|docker|kubernetes|aws|gcp|azure|heroku|vercel|netlify"
    r"|postgresql|mysql|mongodb|redis|elasticsearch"
    r"|graphql|rest\s?api|grpc"
    r"|typescript|javascript|python|java|go|golang|rust|c\+\+|swift|kotlin|php|ruby"
    r"|terraform|ansible|jenkins|github\s?actions|ci/cd"
    r"|webpack|vite|rollup|jest|mocha|pytest|junit"
)

# README 프로젝트 유형: 뒤에 오는 규칙이 앞의 결과를 덮어쓴다
PROJECT_TYPE_RULES: tuple[tuple[str, str], ...] = (
    ("library", r"library|package|npm|pypi|gem"),
    ("api", r"api|backend|server|microservice"),
    ("cli-tool", r"cli|command.?line|terminal"),
    ("dashboard", r"dashboard|admin|panel"),
    ("mobile-app", r"mobile|ios|android|react.?native"),
    ("website", r"website|landing|portfolio"),
)

# 리스트 상한
MAX_DEPENDENCIES = 100
MAX_PACKAGE_DEPENDENCIES = 200
MAX_PACKAGE_SCRIPTS = 50
MAX_PACKAGE_DESCRIPTION = 500
MAX_README_MENTIONS = 50
MAX_DETECTED_TECHNOLOGIES = 500
MAX_NAME_LENGTH = 50

# 점수 계산
SENTINEL_SCORE = -9999
REMOVAL_THRESHOLD = -1000
