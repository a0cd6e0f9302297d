"""CLI command groups for lyrics-manager."""
