"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports defined in
the domain layer. Driver failures are re-raised as DatabaseError here
and nowhere else.
"""
