"""Resume upload, candidate search and CRM list sync client."""

__version__ = "0.1.0"
