"""Utility functions for the invoice dashboard."""

from .pagination import build_pagination_args, get_page, get_per_page

__all__ = [
    "build_pagination_args",
    "get_page",
    "get_per_page",
]
