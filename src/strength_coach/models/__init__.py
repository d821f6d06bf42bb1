"""Data models for sessions, analyses, cycles and suggestions."""
