"""Intersection finders: the Bentley-Ottmann sweep and the brute-force oracle."""
