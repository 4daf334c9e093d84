"""API Resilience Implementations.

Contains the request executor with per-attempt timeouts, retries with
exponential backoff, and the failure classification it relies on.
Bounded Context: API Resilience
"""
