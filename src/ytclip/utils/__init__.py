"""Utility helpers shared across ytclip modules."""
