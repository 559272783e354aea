"""Domain models shared across ytclip services."""
