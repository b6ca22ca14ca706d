from stack_discovery.scrapers.docker_hub.docker_hub import DockerHubAdapter

__all__ = ["DockerHubAdapter"]
