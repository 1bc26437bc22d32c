"""HTTP API for crawlgraph."""
