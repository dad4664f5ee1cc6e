"""Receipt records and operations."""
