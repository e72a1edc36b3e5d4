"""Infrastructure layer — SQLite persistence for products and counts.

This layer depends on stdlib and third-party libs (SQLAlchemy).
It must never import from services, commands, or output.
The service layer bridges between domain values and stored rows.
"""
