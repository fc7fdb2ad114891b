"""
Adapters — thin Google API wrappers that fetch raw trees for the extractors.
"""
