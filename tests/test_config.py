"""
Tests for configuration loading and validation.
"""

import pytest
import yaml

from contact_enricher.config import Config, ConfigManager
from contact_enricher.errors import ConfigurationError


@pytest.fixture
def config_file(tmp_path):
    """Write a YAML mapping and return its path."""

    def _write(data):
        path = tmp_path / 'config.yml'
        path.write_text(yaml.safe_dump(data), encoding='utf-8')
        return str(path)

    return _write


class TestConfigManager:
    """Test file, environment and default settings."""

    def test_defaults_without_file(self, tmp_path):
        config = ConfigManager(str(tmp_path / 'missing.yml')).get_config()

        assert isinstance(config, Config)
        assert config.discovery.provider == 'firecrawl'
        assert config.extraction.max_content_chars == 10000
        assert config.pipeline.row_delay == 2.0
        assert config.pipeline.log_size == 5
        assert config.credentials.missing() == ['gemini_api_key', 'firecrawl_api_key']

    def test_values_from_file(self, config_file):
        path = config_file({
            'credentials': {'gemini_api_key': 'g-key', 'firecrawl_api_key': 'f-key'},
            'discovery': {'provider': 'direct', 'search_limit': 2},
            'extraction': {'model': 'gemini-pro', 'max_content_chars': 12000},
            'pipeline': {'row_delay': 0.5},
        })

        config = ConfigManager(path).get_config()

        assert config.credentials.missing() == []
        assert config.discovery.provider == 'direct'
        assert config.discovery.search_limit == 2
        assert config.extraction.model == 'gemini-pro'
        assert config.extraction.max_content_chars == 12000
        assert config.pipeline.row_delay == 0.5

    def test_environment_overrides_file(self, config_file, monkeypatch):
        path = config_file({'credentials': {'gemini_api_key': 'from-file'}, 'pipeline': {'row_delay': 3}})
        monkeypatch.setenv('GEMINI_API_KEY', 'from-env')
        monkeypatch.setenv('FIRECRAWL_API_KEY', 'fc-env')
        monkeypatch.setenv('ROW_DELAY', '0.25')
        monkeypatch.setenv('DISCOVERY_PROVIDER', 'direct')
        monkeypatch.setenv('LOG_LEVEL', 'warning')

        config = ConfigManager(path).get_config()

        assert config.credentials.gemini_api_key == 'from-env'
        assert config.credentials.firecrawl_api_key == 'fc-env'
        assert config.pipeline.row_delay == 0.25
        assert config.discovery.provider == 'direct'
        assert config.app.log_level == 'WARNING'

    def test_invalid_row_delay_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv('ROW_DELAY', 'soon')

        with pytest.raises(ConfigurationError):
            ConfigManager(str(tmp_path / 'missing.yml')).get_config()

    def test_blank_credentials_count_as_missing(self, config_file):
        path = config_file({'credentials': {'gemini_api_key': '   ', 'firecrawl_api_key': 'f-key'}})

        config = ConfigManager(path).get_config()

        assert config.credentials.missing() == ['gemini_api_key']

    @pytest.mark.parametrize('data, message', [
        ({'discovery': {'provider': 'bing'}}, 'discovery.provider'),
        ({'discovery': {'search_limit': 0}}, 'search_limit'),
        ({'extraction': {'max_content_chars': 50000}}, 'max_content_chars'),
        ({'pipeline': {'row_delay': -1}}, 'row_delay'),
        ({'pipeline': {'log_size': 0}}, 'log_size'),
        ({'app': {'log_level': 'verbose'}}, 'log level'),
    ])
    def test_validation_errors(self, config_file, monkeypatch, data, message):
        monkeypatch.delenv('LOG_LEVEL', raising=False)
        path = config_file(data)

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager(path).get_config()

        assert message in str(exc_info.value)

    def test_non_mapping_file_is_rejected(self, tmp_path):
        path = tmp_path / 'config.yml'
        path.write_text('- just\n- a list\n', encoding='utf-8')

        with pytest.raises(ConfigurationError):
            ConfigManager(str(path)).get_config()
