"""
Invoicing service: invoices, clients and products over HTTP.

Application package root. A modular monolith using hexagonal architecture
(ports & adapters). Every failure is raised as one member of a closed error
taxonomy and rendered once, at the request edge, as a JSON error envelope.

Bounded contexts:
    - billing: Invoices, clients and the product catalog.

Layers:
    - domain: Entities, ports (ABCs), the error taxonomy and validation helpers.
    - application: Use cases, DTOs, orchestration.
    - infrastructure: SQL adapters implementing domain ports.
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (error boundary, request context, logging).
"""
