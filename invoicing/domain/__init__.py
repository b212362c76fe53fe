"""
Domain layer package.

Contains the error taxonomy, the validation helpers, the Result type and
the billing entities and ports. No framework imports, no IO, no side
effects.
"""
