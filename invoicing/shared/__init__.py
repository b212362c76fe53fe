"""
Cross-cutting concerns shared by every layer.

Request context, logging configuration and the error boundary.
"""
