"""Geometry helpers, input validation, configuration loading and generators."""
