"""Sweep data structures, predicate kernels, options and errors."""
