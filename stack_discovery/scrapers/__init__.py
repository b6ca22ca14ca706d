from stack_discovery.scrapers.base_scraper import BaseSourceAdapter
from stack_discovery.scrapers.docker_hub import DockerHubAdapter
from stack_discovery.scrapers.github import GitHubAdapter
from stack_discovery.scrapers.npm import NpmAdapter
from stack_discovery.scrapers.pypi import PyPIAdapter

__all__ = [
    "BaseSourceAdapter",
    "DockerHubAdapter",
    "GitHubAdapter",
    "NpmAdapter",
    "PyPIAdapter",
]
