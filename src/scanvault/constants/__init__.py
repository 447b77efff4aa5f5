"""Constant values shared across scanvault modules."""
