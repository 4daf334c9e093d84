"""Error notification sinks."""
