"""Configuration models."""

from .config import Config, GitConfig, GitHubConfig, LoggingConfig

__all__ = ['Config', 'GitConfig', 'GitHubConfig', 'LoggingConfig']
