"""Person enrichment service: age, gender and nationality lookups persisted to SQL."""

__version__ = "0.1.0"
