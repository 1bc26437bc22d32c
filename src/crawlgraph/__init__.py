"""crawlgraph - codec layer of a web-crawl graph memory store."""

__version__ = "0.1.0"
