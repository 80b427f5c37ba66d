"""
Domain services for business logic that doesn't belong to a specific entity.

Domain services contain business logic that:
- Operates on multiple entities
- Implements formatting rules shared by several use cases
"""
