"""
Contact Enricher - row-by-row contact enrichment for tabular records

Looks up the entity behind every row of a table on the web and fills in
contact attributes (phone, email, website, location, social links) extracted
by a language model.
"""

__version__ = "1.0.0"
