"""CMS config backend: pages and sidebar stored as one JSON document."""

__version__ = "1.0.0"
