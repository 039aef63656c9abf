"""Configuration management for gh-archive."""

from typing import Optional, Dict, Any
from pathlib import Path
import os

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
import yaml
from dotenv import load_dotenv


class GitHubConfig(BaseModel):
    """Configuration for the GitHub API."""

    model_config = ConfigDict(extra='forbid')

    api_url: str = Field(
        default='https://api.github.com', description='GitHub REST API base URL'
    )
    host: str = Field(
        default='github.com', description='Git host used in repository URLs'
    )
    token: Optional[SecretStr] = Field(
        default=None, description='Personal access token'
    )
    timeout: int = Field(default=30, description='Request timeout in seconds')

    @field_validator('api_url')
    @classmethod
    def validate_api_url(cls, v):
        """Validate API URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')

    @field_validator('host')
    @classmethod
    def validate_host(cls, v):
        """Validate host is a bare domain."""
        v = v.strip().rstrip('/')
        if not v or '://' in v or '/' in v:
            raise ValueError('host must be a bare domain such as github.com')
        return v

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v):
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError('Timeout must be positive')
        return v

    def with_token(self, token: str) -> 'GitHubConfig':
        """Return a copy of this configuration carrying the given token."""
        return self.model_copy(update={'token': SecretStr(token)})


class GitConfig(BaseModel):
    """Git transfer configuration."""

    model_config = ConfigDict(extra='forbid')

    temp_dir: Optional[str] = Field(
        default=None,
        description='Base directory for staging mirrors. If not specified, uses system temp directory.',
    )
    executable: str = Field(default='git', description='Git executable')
    timeout: int = Field(
        default=3600, description='Git operation timeout in seconds (default: 1 hour)'
    )
    authenticated_clone: bool = Field(
        default=True,
        description='Embed the API token in the clone URL so private repositories can be mirrored',
    )

    @field_validator('temp_dir')
    @classmethod
    def validate_temp_dir(cls, v):
        """Validate temp directory path."""
        if v is not None and not Path(v).is_absolute():
            raise ValueError('temp_dir must be an absolute path')
        return v

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v):
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError('Git timeout must be positive')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra='forbid')

    level: str = Field(default='WARNING', description='Console log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: Optional[str] = Field(default=None, description='Console log format')

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class for gh-archive."""

    model_config = ConfigDict(extra='forbid')

    github: GitHubConfig = Field(
        default_factory=GitHubConfig, description='GitHub API settings'
    )
    git: GitConfig = Field(default_factory=GitConfig, description='Git settings')
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Load configuration from YAML file.

        A GITHUB_TOKEN environment variable fills in a missing token.
        """
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        load_dotenv()
        env_token = os.getenv('GITHUB_TOKEN')
        if env_token:
            github = config_data.get('github') or {}
            if not github.get('token'):
                github['token'] = env_token
            config_data['github'] = github

        return cls(**config_data)

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        # Load .env file if it exists
        load_dotenv()

        timeout = os.getenv('GITHUB_TIMEOUT')
        git_timeout = os.getenv('GIT_TIMEOUT')
        authenticated_clone = os.getenv('GIT_AUTHENTICATED_CLONE')

        config_data = {
            'github': {
                'api_url': os.getenv('GITHUB_API_URL'),
                'host': os.getenv('GITHUB_HOST'),
                'token': os.getenv('GITHUB_TOKEN') or None,
                'timeout': int(timeout) if timeout else None,
            },
            'git': {
                'temp_dir': os.getenv('GH_ARCHIVE_TEMP_DIR'),
                'executable': os.getenv('GIT_EXECUTABLE'),
                'timeout': int(git_timeout) if git_timeout else None,
                'authenticated_clone': (
                    authenticated_clone.lower() == 'true'
                    if authenticated_clone
                    else None
                ),
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL'),
                'file': os.getenv('LOG_FILE'),
            },
        }

        # Remove None values
        config_data = cls._remove_none_values(config_data)

        return cls(**config_data)

    @staticmethod
    def _remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: Config._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    @staticmethod
    def create_template(output_path: str) -> None:
        """Create a configuration template file.

        The template never contains a token; supply it through GITHUB_TOKEN
        or interactively.
        """
        template_config = {
            'github': {
                'api_url': 'https://api.github.com',
                'host': 'github.com',
                'timeout': 30,
            },
            'git': {
                'temp_dir': None,
                'executable': 'git',
                'timeout': 3600,
                'authenticated_clone': True,
            },
            'logging': {
                'level': 'WARNING',
                'file': None,
            },
        }

        config_file = Path(output_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                template_config, f, default_flow_style=False, indent=2, sort_keys=False
            )
