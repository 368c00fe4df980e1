"""
Freelance dashboard backend package.

In-memory stores for clients, projects, tasks and invoices, the time tracking
and dashboard views derived from them, and the FastAPI app serving them
(`freelance_api.main:app`).
"""
