"""Pure helpers for minutes and dates."""
