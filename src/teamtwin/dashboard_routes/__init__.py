"""Route modules for the teamtwin web API."""
