"""Command line interface for scanvault."""
