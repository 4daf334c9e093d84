"""tubeflow: resilient client for the steel-tube back-office API."""

__version__ = "0.1.0"
