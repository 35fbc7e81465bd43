"""Command-line interface for caskfetch."""
