"""Transport-agnostic chat command handling."""

from hh_tracker.bot.handler import Reply, UpdateHandler, format_stats

__all__ = ["Reply", "UpdateHandler", "format_stats"]
