"""
Cross-cutting pieces of the bakery API: application settings, logging setup,
password hashing and JWT helpers, and the FastAPI auth/permission dependencies.
"""
