"""Web framework integration for structured errors."""
