"""
Configuration management for Contact Enricher.
Handles loading and validation of configuration from YAML files and environment variables.
"""

import os
import yaml
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from .errors import ConfigurationError


@dataclass
class CredentialsConfig:
    """API credentials for the two downstream services."""
    gemini_api_key: str = ""
    firecrawl_api_key: str = ""

    def missing(self) -> list:
        """Return the names of credentials that are not set."""
        missing = []
        if not self.gemini_api_key.strip():
            missing.append("gemini_api_key")
        if not self.firecrawl_api_key.strip():
            missing.append("firecrawl_api_key")
        return missing


@dataclass
class DiscoveryConfig:
    """Web discovery settings."""
    provider: str = "firecrawl"  # firecrawl | direct
    base_url: str = "https://api.firecrawl.dev/v1"
    user_agent: str = "ContactEnricher/1.0"
    search_limit: int = 5
    timeout: int = 60
    probe_timeout: int = 5
    min_content_length: int = 100


@dataclass
class ExtractionConfig:
    """Language-model extraction settings."""
    model: str = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    max_content_chars: int = 10000
    temperature: float = 0.1
    timeout: int = 60


@dataclass
class PipelineConfig:
    """Row loop settings."""
    row_delay: float = 2.0
    log_size: int = 5


@dataclass
class AppConfig:
    """Application configuration settings."""
    log_level: str = "INFO"
    log_dir: str = "logs"


@dataclass
class Config:
    """Main configuration class."""
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    app: AppConfig = field(default_factory=AppConfig)


class ConfigManager:
    """Configuration manager for loading and validating settings."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._find_config_file()
        self._config: Optional[Config] = None

    def _find_config_file(self) -> str:
        """Find configuration file in standard locations."""
        possible_paths = [
            "config.yml",
            "config.yaml",
            os.path.expanduser("~/.contact-enricher/config.yml"),
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        return "config.yml"

    def load_config(self) -> Config:
        """Load configuration from file and environment variables."""
        if self._config is not None:
            return self._config

        config_data = {}
        if os.path.exists(self.config_path):
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
            if not isinstance(config_data, dict):
                raise ConfigurationError(f"Configuration file {self.config_path} must contain a mapping")

        config_data = self._apply_env_overrides(config_data)

        self._config = self._create_config_from_dict(config_data)
        return self._config

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration."""
        env_mappings = {
            'GEMINI_API_KEY': ['credentials', 'gemini_api_key'],
            'FIRECRAWL_API_KEY': ['credentials', 'firecrawl_api_key'],
            'GEMINI_MODEL': ['extraction', 'model'],
            'DISCOVERY_PROVIDER': ['discovery', 'provider'],
            'ROW_DELAY': ['pipeline', 'row_delay'],
            'LOG_LEVEL': ['app', 'log_level'],
        }

        for env_var, config_path in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                current = config_data
                for key in config_path[:-1]:
                    if not isinstance(current.get(key), dict):
                        current[key] = {}
                    current = current[key]

                if env_var == 'ROW_DELAY':
                    try:
                        value = float(value)
                    except ValueError:
                        raise ConfigurationError(f"ROW_DELAY must be a number, got {value!r}")
                elif env_var == 'LOG_LEVEL':
                    value = value.upper()

                current[config_path[-1]] = value

        return config_data

    def _create_config_from_dict(self, data: Dict[str, Any]) -> Config:
        """Create Config object from dictionary data."""
        creds_data = data.get('credentials') or {}
        credentials_config = CredentialsConfig(
            gemini_api_key=str(creds_data.get('gemini_api_key') or ''),
            firecrawl_api_key=str(creds_data.get('firecrawl_api_key') or ''),
        )

        discovery_data = data.get('discovery') or {}
        discovery_config = DiscoveryConfig(
            provider=discovery_data.get('provider', 'firecrawl'),
            base_url=discovery_data.get('base_url', 'https://api.firecrawl.dev/v1'),
            user_agent=discovery_data.get('user_agent', 'ContactEnricher/1.0'),
            search_limit=discovery_data.get('search_limit', 5),
            timeout=discovery_data.get('timeout', 60),
            probe_timeout=discovery_data.get('probe_timeout', 5),
            min_content_length=discovery_data.get('min_content_length', 100),
        )

        extraction_data = data.get('extraction') or {}
        extraction_config = ExtractionConfig(
            model=extraction_data.get('model', 'gemini-1.5-flash'),
            base_url=extraction_data.get('base_url', 'https://generativelanguage.googleapis.com/v1beta'),
            max_content_chars=extraction_data.get('max_content_chars', 10000),
            temperature=extraction_data.get('temperature', 0.1),
            timeout=extraction_data.get('timeout', 60),
        )

        pipeline_data = data.get('pipeline') or {}
        pipeline_config = PipelineConfig(
            row_delay=float(pipeline_data.get('row_delay', 2.0)),
            log_size=pipeline_data.get('log_size', 5),
        )

        app_data = data.get('app') or {}
        app_config = AppConfig(
            log_level=str(app_data.get('log_level', 'INFO')).upper(),
            log_dir=app_data.get('log_dir', 'logs'),
        )

        return Config(
            credentials=credentials_config,
            discovery=discovery_config,
            extraction=extraction_config,
            pipeline=pipeline_config,
            app=app_config,
        )

    def validate_config(self, config: Config) -> bool:
        """Validate configuration settings.

        Credentials are not checked here; the pipeline checks their presence
        when a run starts.
        """
        errors = []

        if config.discovery.provider not in ['firecrawl', 'direct']:
            errors.append("discovery.provider must be 'firecrawl' or 'direct'")

        if config.discovery.search_limit < 1:
            errors.append("discovery.search_limit must be at least 1")

        if not 8000 <= config.extraction.max_content_chars <= 15000:
            errors.append("extraction.max_content_chars must be between 8000 and 15000")

        if config.pipeline.row_delay < 0:
            errors.append("pipeline.row_delay must not be negative")

        if config.pipeline.log_size < 1:
            errors.append("pipeline.log_size must be at least 1")

        if config.app.log_level not in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
            errors.append("Invalid log level")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

        return True

    def get_config(self) -> Config:
        """Get validated configuration."""
        config = self.load_config()
        self.validate_config(config)
        return config


# Global configuration manager instance
config_manager = ConfigManager()


def get_config() -> Config:
    """Get the global configuration."""
    return config_manager.get_config()


def reload_config(config_path: Optional[str] = None) -> Config:
    """Reload configuration from file."""
    global config_manager
    config_manager = ConfigManager(config_path)
    return config_manager.get_config()
