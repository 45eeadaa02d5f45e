"""
Firecrawl discovery client.
Searches for an entity, scrapes the best page it can reach, and returns its main content.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..config import get_config
from ..enrichment.models import DiscoveryResult, EntityDiscoveryClient
from ..errors import ConfigurationError, DiscoveryError
from .page_fetcher import alternative_source_urls, candidate_website_urls

SEARCH_SUFFIX = 'contact email phone website'


class FirecrawlDiscoveryClient(EntityDiscoveryClient):
    """Discovers entity content through the Firecrawl search and scrape APIs.

    Lookup order for an entity:

    1. the top search result for "<name> contact email phone website"
    2. the first reachable guessed homepage (www./bare host over common TLDs)
    3. Crunchbase, LinkedIn and Wikipedia pages built from the name

    The first source whose scrape yields enough content wins.
    """

    def __init__(self, config=None):
        self.config = config or get_config()
        self.logger = logging.getLogger(__name__)

        self.api_key = self.config.credentials.firecrawl_api_key
        self.base_url = self.config.discovery.base_url.rstrip('/')
        self.timeout = self.config.discovery.timeout
        self.min_content_length = self.config.discovery.min_content_length

        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f"Bearer {self.api_key}",
            'Content-Type': 'application/json',
        })

        # Homepage probing goes to arbitrary hosts, never with the API key
        self.probe_session = requests.Session()
        self.probe_session.headers.update({
            'User-Agent': self.config.discovery.user_agent,
        })

    def _post(self, endpoint: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """POST to the Firecrawl API, returning the decoded body or None."""
        if not self.api_key:
            raise ConfigurationError("Firecrawl API key not found")

        url = f"{self.base_url}/{endpoint}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout:
            self.logger.warning(f"Firecrawl {endpoint} timed out for {payload}")
            return None
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Firecrawl {endpoint} request failed: {e}")
            return None
        except ValueError as e:
            self.logger.warning(f"Firecrawl {endpoint} returned invalid JSON: {e}")
            return None

        if not isinstance(data, dict) or not data.get('success'):
            self.logger.warning(f"Firecrawl {endpoint} unsuccessful: {data}")
            return None
        return data

    def search(self, query: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Search the web, returning result dicts with url/title/description."""
        limit = limit or self.config.discovery.search_limit
        self.logger.debug(f"Searching for: {query}")

        data = self._post('search', {'query': query, 'limit': limit})
        if not data:
            return []

        results = data.get('data') or []
        return [result for result in results if isinstance(result, dict) and result.get('url')]

    def scrape(self, url: str) -> Optional[DiscoveryResult]:
        """Scrape a page's main content, None if missing or too short."""
        self.logger.debug(f"Scraping URL: {url}")

        data = self._post('scrape', {
            'url': url,
            'formats': ['markdown', 'html'],
            'onlyMainContent': True,
            'timeout': 45000,
            'waitFor': 3000,
        })
        if not data:
            return None

        page = data.get('data') or {}
        content = page.get('markdown') or page.get('html') or ''
        if len(content.strip()) < self.min_content_length:
            self.logger.debug(f"Insufficient content extracted from {url}")
            return None

        source_url = (page.get('metadata') or {}).get('sourceURL') or url
        return DiscoveryResult(content=content, source_url=source_url)

    def find_entity_website(self, entity_name: str) -> Optional[str]:
        """Return the first guessed homepage that answers a HEAD request."""
        for url in candidate_website_urls(entity_name):
            try:
                response = self.probe_session.head(
                    url,
                    timeout=self.config.discovery.probe_timeout,
                    allow_redirects=True,
                )
            except requests.exceptions.RequestException:
                self.logger.debug(f"URL {url} is not accessible, trying next")
                continue

            if response.status_code < 400:
                self.logger.debug(f"URL {url} appears to be accessible")
                return url

        return None

    def discover(self, entity_name: str) -> DiscoveryResult:
        """Find and scrape content describing an entity."""
        results = self.search(f"{entity_name} {SEARCH_SUFFIX}")
        if results:
            top_url = results[0]['url']
            self.logger.info(f"Scraping top search result for {entity_name}: {top_url}")
            result = self.scrape(top_url)
            if result:
                return result
        else:
            self.logger.info(f"No search results found for {entity_name}")

        website = self.find_entity_website(entity_name)
        if website:
            self.logger.info(f"Found potential website for {entity_name}: {website}")
            result = self.scrape(website)
            if result:
                return result

        for alt_url in alternative_source_urls(entity_name):
            self.logger.debug(f"Trying alternative source: {alt_url}")
            result = self.scrape(alt_url)
            if result:
                return result

        raise DiscoveryError(f"Could not find or scrape website for {entity_name}", entity_name)

    def close(self):
        """Clean up resources."""
        self.session.close()
        self.probe_session.close()
