"""Busy Brief worker: structured briefs from unstructured workplace text."""
