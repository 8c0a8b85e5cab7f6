"""Fetch, normalise and render unresolved pull request feedback."""
