"""Health check, database debug view and self-service role repair."""
