"""Employee directory HTTP service."""
