"""AI grounding context module."""

from .builder import CachedContext, ContextBuilder, ContextStats, format_item_line, format_stats_summary

__all__ = ["CachedContext", "ContextBuilder", "ContextStats", "format_item_line", "format_stats_summary"]
