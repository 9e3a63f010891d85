"""Newsdesk: articles, comments and reader accounts behind a typed operation API."""

__version__ = "1.0.0"
