"""
Error translation at the request edge.

The boundary middleware classifies failures, renders the error envelope and
logs each failure once.
"""
