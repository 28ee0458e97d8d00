"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each domain area and operate
on the AsyncSession handed to them by a service or route.
"""
