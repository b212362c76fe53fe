"""
Billing bounded context: domain layer.

Clients, products and invoices, plus the repository ports the
application layer depends on.
"""
