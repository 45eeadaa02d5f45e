"""
Pytest configuration and fixtures for Contact Enricher tests.
"""

import os
import sys
import pytest
from pathlib import Path
from typing import Dict, List

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from contact_enricher.config import (
    AppConfig,
    Config,
    CredentialsConfig,
    DiscoveryConfig,
    ExtractionConfig,
    PipelineConfig,
)
from contact_enricher.enrichment.models import DiscoveryResult, EntityDiscoveryClient, ExtractionClient
from contact_enricher.errors import DiscoveryError


@pytest.fixture
def test_config():
    """Provide test configuration with credentials and no row delay."""
    return Config(
        credentials=CredentialsConfig(
            gemini_api_key='test-gemini-key',
            firecrawl_api_key='test-firecrawl-key',
        ),
        discovery=DiscoveryConfig(
            provider='firecrawl',
            base_url='https://api.firecrawl.test/v1',
            user_agent='TestBot/1.0',
            search_limit=3,
            timeout=5,
            probe_timeout=1,
            min_content_length=100,
        ),
        extraction=ExtractionConfig(
            model='gemini-test',
            base_url='https://gemini.test/v1beta',
            max_content_chars=10000,
            temperature=0.0,
            timeout=5,
        ),
        pipeline=PipelineConfig(row_delay=0.0, log_size=5),
        app=AppConfig(log_level='DEBUG', log_dir='logs'),
    )


@pytest.fixture
def unconfigured_config(test_config):
    """Configuration without any API keys."""
    test_config.credentials = CredentialsConfig()
    return test_config


class FakeDiscoveryClient(EntityDiscoveryClient):
    """Discovery double returning canned content per entity."""

    def __init__(self, pages: Dict[str, str] = None, default: str = None):
        self.pages = pages or {}
        self.default = default
        self.calls: List[str] = []
        self.closed = False

    def discover(self, entity_name):
        self.calls.append(entity_name)
        content = self.pages.get(entity_name, self.default)
        if content is None:
            raise DiscoveryError(f"Could not find or scrape website for {entity_name}", entity_name)
        slug = entity_name.lower().replace(' ', '')
        return DiscoveryResult(content=content, source_url=f"https://{slug}.com")

    def close(self):
        self.closed = True


class FakeExtractionClient(ExtractionClient):
    """Extraction double returning canned fields per entity."""

    def __init__(self, fields: Dict[str, Dict[str, str]] = None, error: Exception = None):
        self.fields = fields or {}
        self.error = error
        self.calls: List[tuple] = []
        self.closed = False

    def extract(self, content, entity_name):
        self.calls.append((content, entity_name))
        if self.error is not None:
            raise self.error
        return dict(self.fields.get(entity_name, {}))

    def close(self):
        self.closed = True


@pytest.fixture
def fake_discovery():
    return FakeDiscoveryClient


@pytest.fixture
def fake_extraction():
    return FakeExtractionClient


@pytest.fixture
def sample_table():
    """Table with a name column, one blank entity and an unrelated column."""
    return [
        {'name': 'Acme', 'city': ''},
        {'name': '', 'city': 'NYC'},
    ]


@pytest.fixture
def companies_table():
    """Five companies with their cities."""
    return [
        {'Company Name': 'Acme', 'City': 'Boston'},
        {'Company Name': 'Globex', 'City': 'Springfield'},
        {'Company Name': 'Initech', 'City': 'Austin'},
        {'Company Name': 'Umbrella', 'City': 'Raccoon City'},
        {'Company Name': 'Hooli', 'City': 'Palo Alto'},
    ]


@pytest.fixture
def sample_page_content():
    """Markdown page content as returned by a scraper."""
    return (
        "# Acme Corporation\n\n"
        "Acme builds anvils, rockets and other fine products for discerning coyotes.\n\n"
        "## Contact\n\n"
        "Email: info@acme.com | Phone: +1 555 0100 | 1 Road Runner Way, Tucson, AZ\n"
        "Follow us on https://www.linkedin.com/company/acme\n"
    )


@pytest.fixture
def sample_html_content():
    """Sample HTML content for testing."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Acme Corporation</title>
        <script>var tracking = true;</script>
    </head>
    <body>
        <nav>Home | Products | About</nav>
        <h1>Welcome to Acme</h1>
        <p>Acme builds anvils, rockets and other fine products for discerning coyotes everywhere.</p>
        <p>Contact us at <a href="mailto:info@acme.com">info@acme.com</a> or call +1 555 0100.</p>
        <footer>Copyright Acme</footer>
    </body>
    </html>
    """


@pytest.fixture
def write_csv(tmp_path):
    """Write a CSV file from a header and rows, returning its path."""

    def _write(name: str, header: List[str], rows: List[List[str]]) -> Path:
        path = tmp_path / name
        lines = [','.join(header)] + [','.join(row) for row in rows]
        path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
        return path

    return _write


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Keep real credentials from the environment out of tests."""
    for var in ('GEMINI_API_KEY', 'FIRECRAWL_API_KEY', 'GEMINI_MODEL',
                'DISCOVERY_PROVIDER', 'ROW_DELAY'):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv('LOG_LEVEL', 'DEBUG')
