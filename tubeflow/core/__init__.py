"""Application layer: command orchestration."""
