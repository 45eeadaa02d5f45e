"""
Contact extraction from discovered web content.
Asks a language model for a JSON record of contact fields and cleans its answer.
"""

import logging

from .fields import CONTACT_FIELDS, ExtractedFields, parse_extraction_response
from .models import ExtractionClient
from ..config import get_config

FIELD_DESCRIPTIONS = {
    'contact': 'main contact phone number',
    'phone': 'primary phone number',
    'email': 'official email address',
    'website': 'official website URL',
    'location': 'city, country or full address',
    'linkedin': 'LinkedIn profile URL',
    'address': 'physical address if available',
    'twitter': 'Twitter / X profile URL',
    'facebook': 'Facebook page URL',
}

PROMPT_TEMPLATE = """
You are a data extraction AI. Extract contact information for "{entity_name}" from the following web content.

Web Content:
{content}

Extract the following information and return it as a JSON object:
{schema}

IMPORTANT RULES:
1. Only extract information that is clearly associated with "{entity_name}"
2. For phone numbers, look for main/general contact numbers, support numbers, or office numbers
3. For emails, prefer info@, contact@, hello@, or general inquiry emails
4. For website, use the main domain URL
5. For location, provide city and country at minimum
6. If information is not clearly found, use empty string ""
7. Ensure all URLs are complete and valid (include https://)
8. Format phone numbers in international format if possible
9. Return ONLY the JSON object, no additional text or explanation

JSON:"""


class ContactExtractor(ExtractionClient):
    """Extracts contact fields for an entity using a text-generation client."""

    def __init__(self, llm_client, config=None):
        self.config = config or get_config()
        self.logger = logging.getLogger(__name__)
        self.llm_client = llm_client
        self.max_content_chars = self.config.extraction.max_content_chars

    def build_prompt(self, content: str, entity_name: str) -> str:
        """Render the extraction prompt with the content capped."""
        schema_lines = ',\n'.join(
            f'  "{name}": "{FIELD_DESCRIPTIONS[name]}"' for name in CONTACT_FIELDS
        )
        return PROMPT_TEMPLATE.format(
            entity_name=entity_name,
            content=content[:self.max_content_chars],
            schema='{\n' + schema_lines + '\n}',
        )

    def extract(self, content: str, entity_name: str) -> ExtractedFields:
        """Extract contact fields for an entity from raw content."""
        self.logger.debug(
            f"Extracting contact info for {entity_name} from {len(content)} characters of content"
        )

        prompt = self.build_prompt(content, entity_name)
        response_text = self.llm_client.generate(prompt)

        fields = parse_extraction_response(response_text)
        self.logger.debug(f"Cleaned fields for {entity_name}: {sorted(fields)}")
        return fields

    def close(self):
        """Clean up resources."""
        if hasattr(self.llm_client, 'close'):
            self.llm_client.close()
