"""Daily Briefing: news dedup and topic clustering."""

__version__ = "0.1.0"
