"""
Core models, parsing, configuration and error types.
"""
