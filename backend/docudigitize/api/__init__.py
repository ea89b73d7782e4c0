"""
API layer - exceptions, DTOs and error handling shared by the routers.
"""
