"""Domain Event definitions.

Represents significant occurrences in a request lifecycle that other parts
of the system might react to.
"""
