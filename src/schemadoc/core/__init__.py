"""Core schema model, analysis engine, adapters and export."""
