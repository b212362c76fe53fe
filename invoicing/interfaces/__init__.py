"""
Interfaces layer package.

Contains FastAPI routers and Pydantic request/response schemas.
No business logic belongs here. Routes call use cases and return
responses; failures are rendered by the error boundary.
"""
