"""Receipt search."""
