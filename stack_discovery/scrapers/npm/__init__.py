from stack_discovery.scrapers.npm.npm import NpmAdapter

__all__ = ["NpmAdapter"]
