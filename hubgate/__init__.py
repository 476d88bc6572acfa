"""hubgate: rate-limited GitHub API access for catalog enrichment."""

__version__ = "0.1.0"
