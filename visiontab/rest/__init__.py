"""
Thin HTTP client for the Cloud Vision annotate endpoints.
"""
