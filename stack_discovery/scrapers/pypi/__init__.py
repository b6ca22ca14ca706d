from stack_discovery.scrapers.pypi.pypi import PyPIAdapter

__all__ = ["PyPIAdapter"]
