"""Command line interface for release-keeper."""
