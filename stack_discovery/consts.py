USER_AGENT = "StackDiscovery/1.0"

# Environment variables
ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
ENV_DISCOVERY_SOURCES = "DISCOVERY_SOURCES"

# npm registry (package-registry-A)
NPM_BASE_URL = "https://registry.npmjs.org"
NPM_DOWNLOADS_URL = "https://api.npmjs.org/downloads/point"
NPM_MAX_REQUESTS = 100  # per minute
NPM_WINDOW_SECONDS = 60.0
NPM_TIMEOUT_SECONDS = 10.0
NPM_SEARCH_CACHE_TTL = 1800  # 30 minutes
NPM_DOWNLOADS_CACHE_TTL = 3600  # 1 hour
NPM_PACKAGE_CACHE_TTL = 600  # 10 minutes
NPM_TRENDING_SEEDS = [
    "react",
    "vue",
    "angular",
    "typescript",
    "nodejs",
    "webpack",
    "babel",
    "express",
    "lodash",
    "axios",
    "jest",
    "eslint",
    "prettier",
    "vite",
]

# PyPI (package-registry-B)
PYPI_BASE_URL = "https://pypi.org/pypi"
PYPI_MAX_REQUESTS = 60  # per minute
PYPI_WINDOW_SECONDS = 60.0
PYPI_TIMEOUT_SECONDS = 10.0
PYPI_PACKAGE_CACHE_TTL = 600  # 10 minutes
PYPI_TRENDING_SEEDS = [
    "requests",
    "numpy",
    "pandas",
    "flask",
    "django",
    "tensorflow",
    "scikit-learn",
    "matplotlib",
    "selenium",
    "beautifulsoup4",
    "pillow",
    "opencv-python",
    "jupyter",
    "fastapi",
    "pydantic",
]

# GitHub (repo-host)
GITHUB_BASE_URL = "https://api.github.com"
GITHUB_MAX_REQUESTS_AUTHENTICATED = 5000  # per hour
GITHUB_MAX_REQUESTS_ANONYMOUS = 60  # per hour
GITHUB_WINDOW_SECONDS = 3600.0
GITHUB_TIMEOUT_SECONDS = 15.0
GITHUB_SEARCH_CACHE_TTL = 1800  # 30 minutes
GITHUB_REPO_CACHE_TTL = 600  # 10 minutes
GITHUB_AWESOME_CACHE_TTL = 3600  # 1 hour
GITHUB_AWESOME_QUERY = "awesome in:name topic:awesome"
GITHUB_AWESOME_PER_PAGE = 50
# Trending seed served by the curated awesome-list search instead of a topic query
GITHUB_AWESOME_SEED = "awesome-lists"
GITHUB_TRENDING_WINDOW_DAYS = 7
GITHUB_TRENDING_SEEDS = [
    "topic:devops",
    "topic:database",
    "topic:frontend",
    "topic:api",
    "topic:testing",
    "topic:machine-learning",
    "topic:monitoring",
    "topic:security",
    GITHUB_AWESOME_SEED,
]

# Docker Hub (image-registry)
DOCKER_HUB_BASE_URL = "https://hub.docker.com/v2"
DOCKER_HUB_MAX_REQUESTS = 100  # per minute
DOCKER_HUB_WINDOW_SECONDS = 60.0
DOCKER_HUB_TIMEOUT_SECONDS = 10.0
DOCKER_HUB_SEARCH_CACHE_TTL = 1800  # 30 minutes
DOCKER_HUB_REPO_CACHE_TTL = 600  # 10 minutes
DOCKER_HUB_TRENDING_SEEDS = [
    "nginx",
    "postgres",
    "redis",
    "node",
    "python",
    "mysql",
    "mongo",
    "elasticsearch",
    "ubuntu",
    "alpine",
]

# Fan-out sizes
TRENDING_RESULTS_PER_SEED = 5
SEARCH_RESULTS_LIMIT = 20
TRENDING_RESULTS_LIMIT = 50

# Default request cache TTL when the caller does not provide one
DEFAULT_CACHE_TTL = 300  # 5 minutes

# Discovery defaults
DEFAULT_MAX_TOOLS_PER_SOURCE = 100
DEFAULT_MIN_POPULARITY_THRESHOLD = 0.0
DEFAULT_CACHE_EXPIRY_SECONDS = 3600  # 1 hour
DEFAULT_BATCH_SIZE = 50

# Recommendation output sizes
RECOMMENDATION_LIMIT = 15
RECOMMENDATION_REASONING_SAMPLE = 10

# DTO badge threshold
TRENDING_BADGE_THRESHOLD = 50.0
