"""Data models for topics and build findings."""
