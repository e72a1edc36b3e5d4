"""Service layer — business logic returning ServiceResult.

Services may import from the domain, infrastructure and config layers.
They must never import from commands or output.
"""
