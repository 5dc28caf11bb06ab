"""
Link registries backed by a GitHub repository.
"""

from typing import Dict, Type

from ..config import RegistryConfig
from ..error_handling import ConfigurationError
from ..github import GitHubClient
from .base_registry import BaseRegistry
from .json_registry import JsonRegistry
from .folder_registry import FolderRegistry
from .pages import render_redirect_page, render_pdf_viewer

REGISTRY_BACKENDS: Dict[str, Type[BaseRegistry]] = {
    JsonRegistry.backend_name: JsonRegistry,
    FolderRegistry.backend_name: FolderRegistry,
}


def create_registry(client: GitHubClient, config: RegistryConfig, base_url: str) -> BaseRegistry:
    """Instantiate the registry selected by ``config.backend``."""
    try:
        registry_cls = REGISTRY_BACKENDS[config.backend]
    except KeyError:
        raise ConfigurationError(
            f"Unknown registry backend: {config.backend}",
            error_code="invalid_backend"
        ) from None
    return registry_cls(client, config, base_url)


__all__ = [
    "BaseRegistry",
    "JsonRegistry",
    "FolderRegistry",
    "REGISTRY_BACKENDS",
    "create_registry",
    "render_redirect_page",
    "render_pdf_viewer"
]
