"""Package registry adapters."""
