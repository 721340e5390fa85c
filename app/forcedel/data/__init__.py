"""Bundled data files for forcedel."""
