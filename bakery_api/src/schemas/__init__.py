"""
Pydantic request and response models, one module per business area.

Read models derive from common.ORMModel and validate straight from ORM rows;
create/update payloads are plain BaseModels.
"""

from .common import ErrorResponse, MessageResponse, ORMModel, Page  # noqa: F401
