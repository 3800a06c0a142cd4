"""Core runtime helpers shared by the jetmigrate pipeline and CLI."""
