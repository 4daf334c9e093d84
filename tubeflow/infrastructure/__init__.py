"""Infrastructure Layer Implementations.

Concrete adapters for HTTP, configuration, logging, notifications and the console.
"""
