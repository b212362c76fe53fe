"""
Application layer package.

Contains use cases that orchestrate domain logic and raise the
application error taxonomy. This layer depends on domain ports,
never on infrastructure, and never serializes responses.
"""
