"""
ORM models for domain entities across security, catalog, inventory, sales,
procurement, ledger, production, staff, finance and system settings.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

# Re-export commonly used models for convenience and to ensure import side-effects
# register all mapped classes with SQLAlchemy metadata.

from .security import (  # noqa: F401
    User,
    Permission,
    RolePermission,
    UserPermission,
    LoginLog,
    AuditLog,
)
from .catalog import (  # noqa: F401
    Category,
    Product,
    ProductIngredient,
    Unit,
    UnitConversion,
)
from .inventory import (  # noqa: F401
    InventoryCategory,
    InventoryItem,
    InventoryTransaction,
)
from .sales import (  # noqa: F401
    Customer,
    Order,
    OrderItem,
)
from .procurement import (  # noqa: F401
    Party,
    Purchase,
    PurchaseItem,
)
from .ledger import LedgerTransaction  # noqa: F401
from .production import ProductionScheduleItem  # noqa: F401
from .staff import (  # noqa: F401
    Staff,
    Attendance,
    SalaryPayment,
    LeaveRequest,
    StaffSchedule,
)
from .finance import (  # noqa: F401
    Expense,
    Asset,
)
from .system import (  # noqa: F401
    Setting,
    Notification,
    NotificationPreference,
)
