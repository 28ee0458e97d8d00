"""
API route modules for the bakery backend.

Each module exposes an APIRouter per area: auth and users, permissions,
catalog, inventory, orders (including the public order form), production,
customer and party ledgers, purchases, finance, staff, settings,
notifications, audit, reports and uploads.

Routers are included from src.api.main (under the /api/v1 prefix).
"""
