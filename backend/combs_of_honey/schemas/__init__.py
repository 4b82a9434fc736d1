# Schemas package init
"""
Pydantic models defining the JSON contract of the API.

JSON field names are camelCase (`combId`, `createdAt`, ...) through an alias
generator; Python code uses the snake_case attribute names.
"""
