"""Domain interfaces (ports) implemented by the infrastructure layer."""
