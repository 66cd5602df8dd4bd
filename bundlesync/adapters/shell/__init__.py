"""Shell adapters — subprocess-backed collaborators."""
