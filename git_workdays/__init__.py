"""Summarize git history into calendar-day work summaries."""
