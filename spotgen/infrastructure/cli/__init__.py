"""Command line interface for spotgen."""
