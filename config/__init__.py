"""Build configuration for the content catalog engine."""
