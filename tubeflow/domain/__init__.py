"""Domain layer: request lifecycle models, events and interfaces."""
