"""schemadoc - document relational database schemas as spreadsheets."""

__version__ = "0.1.0"
