from stack_discovery.scrapers.github.github import GitHubAdapter

__all__ = ["GitHubAdapter"]
