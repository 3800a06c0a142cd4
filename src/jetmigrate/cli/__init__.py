"""Command line interface for jetmigrate."""
