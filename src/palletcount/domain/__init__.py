"""Domain layer — packaging factors, conversion, matching, aggregation.

This layer depends only on stdlib.
It must never import from services, infrastructure, commands, or config.
"""
