"""
Gemini text-generation client.
Sends a single prompt to the generateContent REST endpoint and returns the answer text.
"""

import time
import logging
from typing import Any, Dict

import requests

from ..config import get_config
from ..errors import ConfigurationError, ExtractionError


class GeminiClient:
    """Minimal client for the Gemini generateContent API."""

    def __init__(self, config=None):
        self.config = config or get_config()
        self.logger = logging.getLogger(__name__)

        self.api_key = self.config.credentials.gemini_api_key
        self.model = self.config.extraction.model
        self.base_url = self.config.extraction.base_url.rstrip('/')
        self.timeout = self.config.extraction.timeout

        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
        })

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def generate(self, prompt: str) -> str:
        """Generate text for a prompt."""
        if not self.api_key:
            raise ConfigurationError("Gemini API key not found")

        payload = {
            'contents': [{'role': 'user', 'parts': [{'text': prompt}]}],
            'generationConfig': {
                'temperature': self.config.extraction.temperature,
            },
        }

        start_time = time.time()
        try:
            response = self.session.post(
                self.endpoint,
                headers={'x-goog-api-key': self.api_key},
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout:
            raise ExtractionError(f"Gemini request timed out after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            raise ExtractionError(f"Gemini request failed: {e}")
        except ValueError as e:
            raise ExtractionError(f"Gemini returned invalid JSON: {e}")

        self.logger.debug(f"Gemini responded in {time.time() - start_time:.2f}s")
        return self._response_text(data)

    def _response_text(self, data: Dict[str, Any]) -> str:
        """Join the text parts of the first candidate."""
        candidates = data.get('candidates') or []
        if not candidates:
            feedback = data.get('promptFeedback', {})
            raise ExtractionError(f"Gemini returned no candidates: {feedback}")

        parts = (candidates[0].get('content') or {}).get('parts') or []
        text = ''.join(part.get('text', '') for part in parts if isinstance(part, dict))
        if not text:
            raise ExtractionError("Gemini returned an empty answer")
        return text

    def close(self):
        """Clean up resources."""
        if hasattr(self, 'session'):
            self.session.close()
