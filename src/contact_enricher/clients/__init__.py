"""
Clients for the external discovery and extraction services.
"""

from .firecrawl import FirecrawlDiscoveryClient
from .gemini import GeminiClient
from .page_fetcher import DirectDiscoveryClient, PageFetcher

__all__ = ['FirecrawlDiscoveryClient', 'GeminiClient', 'DirectDiscoveryClient', 'PageFetcher']


def build_discovery_client(config):
    """Create the discovery client selected by ``discovery.provider``."""
    if config.discovery.provider == 'direct':
        return DirectDiscoveryClient(config)
    return FirecrawlDiscoveryClient(config)
