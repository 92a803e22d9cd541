"""
Constants for the CMS admin backend.
"""

# Safety ceiling for a single import, prevents accidental massive imports
MAX_IMPORT_FIELDS = 500

DEFAULT_FIELD_TYPE = "text"
DEFAULT_CONTENT_KIND = "content"
