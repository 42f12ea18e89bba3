"""Portflow MCP — portfolio content analysis and publishing."""

__version__ = "0.1.0"
