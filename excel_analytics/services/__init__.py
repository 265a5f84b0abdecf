"""Processing, chart, preview and pagination services."""
