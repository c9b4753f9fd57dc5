"""Command line interface for schemadoc."""
