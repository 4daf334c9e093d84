"""Configuration loading and the API endpoint registry."""
