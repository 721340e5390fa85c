"""Core services for forcedel: paths, configuration, theme and history state."""
