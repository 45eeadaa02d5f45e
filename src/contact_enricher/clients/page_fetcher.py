"""
Direct web discovery without a scraping API.
Guesses an entity's website from its name, fetches it, and reduces the page to plain text.
"""

import re
import time
import logging
from typing import Optional, Dict, List
from dataclasses import dataclass

import requests
from bs4 import BeautifulSoup

from ..config import get_config
from ..enrichment.models import DiscoveryResult, EntityDiscoveryClient
from ..errors import DiscoveryError

CANDIDATE_TLDS = ('com', 'org', 'net', 'in', 'co')


def entity_slug(entity_name: str) -> str:
    """Lowercase alphanumeric form of a name, e.g. 'Acme Labs, Inc.' -> 'acmelabsinc'."""
    lowered = re.sub(r'[^a-z0-9\s]', '', entity_name.lower())
    return re.sub(r'\s+', '', lowered)


def candidate_website_urls(entity_name: str) -> List[str]:
    """Likely homepage URLs for an entity, most likely first."""
    slug = entity_slug(entity_name)
    if not slug:
        return []

    urls = []
    for tld in CANDIDATE_TLDS:
        urls.append(f"https://www.{slug}.{tld}")
        urls.append(f"https://{slug}.{tld}")
    return urls


def alternative_source_urls(entity_name: str) -> List[str]:
    """Directory and encyclopedia pages that often describe organizations."""
    dashed = re.sub(r'\s+', '-', entity_name.strip().lower())
    underscored = re.sub(r'\s+', '_', entity_name.strip())
    return [
        f"https://www.crunchbase.com/organization/{dashed}",
        f"https://www.linkedin.com/company/{dashed}",
        f"https://en.wikipedia.org/wiki/{underscored}",
    ]


@dataclass
class PageContent:
    """Represents fetched page content."""
    url: str
    title: str
    content: str
    status_code: int
    response_time: float


class PageFetcher:
    """Handles fetching individual web pages."""

    def __init__(self, config=None):
        self.config = config or get_config()
        self.logger = logging.getLogger(__name__)

        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': self.config.discovery.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
            'Accept-Encoding': 'gzip, deflate',
            'Connection': 'keep-alive',
        })

    def fetch_page(self, url: str, timeout: Optional[int] = None) -> Optional[PageContent]:
        """Fetch a single web page, returning None on any failure."""
        timeout = timeout or self.config.discovery.probe_timeout

        try:
            start_time = time.time()
            response = self.session.get(url, timeout=timeout, allow_redirects=True)
            response_time = time.time() - start_time
        except requests.exceptions.Timeout:
            self.logger.debug(f"Timeout fetching {url}")
            return None
        except requests.exceptions.RequestException as e:
            self.logger.debug(f"Request error fetching {url}: {e}")
            return None

        return self._parse_page_content(response, url, response_time)

    def _parse_page_content(self, response: requests.Response, url: str,
                            response_time: float) -> Optional[PageContent]:
        """Parse page content from HTTP response."""
        if response.status_code >= 400:
            self.logger.debug(f"HTTP {response.status_code} for {url}")
            return None

        content_type = response.headers.get('content-type', '').lower()
        if 'text/html' not in content_type:
            self.logger.debug(f"Skipping non-HTML content: {url} ({content_type})")
            return None

        soup = BeautifulSoup(response.text, 'html.parser')

        title_elem = soup.find('title')
        title = title_elem.get_text(strip=True) if title_elem else ""

        for element in soup(["script", "style", "nav", "footer", "header"]):
            element.decompose()

        # Collapse the text into single-spaced phrases
        lines = (line.strip() for line in soup.get_text().splitlines())
        chunks = (phrase.strip() for line in lines for phrase in line.split("  "))
        content = ' '.join(chunk for chunk in chunks if chunk)

        return PageContent(
            url=response.url or url,
            title=title,
            content=content,
            status_code=response.status_code,
            response_time=response_time,
        )

    def close(self):
        """Clean up resources."""
        if hasattr(self, 'session'):
            self.session.close()


class DirectDiscoveryClient(EntityDiscoveryClient):
    """Discovers entity content by fetching guessed homepages directly."""

    def __init__(self, config=None, page_fetcher: Optional[PageFetcher] = None):
        self.config = config or get_config()
        self.logger = logging.getLogger(__name__)
        self.page_fetcher = page_fetcher or PageFetcher(self.config)
        self.min_content_length = self.config.discovery.min_content_length
        self._cache: Dict[str, DiscoveryResult] = {}

    def discover(self, entity_name: str) -> DiscoveryResult:
        """Return text of the first guessed homepage with enough content."""
        if entity_name in self._cache:
            return self._cache[entity_name]

        for url in candidate_website_urls(entity_name):
            self.logger.debug(f"Testing URL: {url}")
            page = self.page_fetcher.fetch_page(url)
            if page is None:
                continue

            text = f"{page.title}\n{page.content}".strip()
            if len(text) < self.min_content_length:
                self.logger.debug(f"Insufficient content at {page.url} ({len(text)} chars)")
                continue

            self.logger.info(
                f"Found website for {entity_name}: {page.url} "
                f"(HTTP {page.status_code} in {page.response_time:.2f}s)"
            )
            result = DiscoveryResult(content=text, source_url=page.url)
            self._cache[entity_name] = result
            return result

        raise DiscoveryError(f"Could not find a website for {entity_name}", entity_name)

    def close(self):
        """Clean up resources."""
        self.page_fetcher.close()
