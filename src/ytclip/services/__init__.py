"""Service layer for ytclip."""
