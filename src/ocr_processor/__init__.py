"""Parsing of OCR and categorization output."""
