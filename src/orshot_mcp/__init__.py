"""MCP server for rendering images, PDFs and videos from Orshot templates."""

__version__ = "1.9.0"
