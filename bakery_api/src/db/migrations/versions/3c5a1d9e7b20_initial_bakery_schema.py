"""Initial bakery schema.

- security: users, permissions, role_permissions, user_permissions, login_logs, audit_logs
- catalog: categories, units, unit_conversions, products, product_ingredients
- inventory: inventory_categories, inventory_items, inventory_transactions
- sales: customers, orders, order_items
- procurement: parties, purchases, purchase_items
- ledger: ledger_transactions
- production: production_schedule
- staff: staff, attendance, salary_payments, leave_requests, staff_schedules
- finance: expenses, assets
- system: settings, notifications, notification_preferences
"""

from typing import List, Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c5a1d9e7b20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


NOW = sa.text("CURRENT_TIMESTAMP")
TRUE = sa.text("true")
FALSE = sa.text("false")
JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _pk() -> sa.Column:
    return sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True)


def _timestamps() -> List[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
    ]


def _user_fk(column: str, table: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        [column], ["users.id"], ondelete="SET NULL", name=f"fk_{table}_{column}_users"
    )


def upgrade() -> None:
    # SECURITY
    op.create_table(
        "users",
        _pk(),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("profile_image_url", sa.Text(), nullable=True),
        sa.Column("role", sa.Text(), server_default="staff", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=TRUE, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "permissions",
        _pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("resource", sa.Text(), nullable=False),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_permissions_name"),
        sa.UniqueConstraint("resource", "action", name="uq_permissions_resource_action"),
    )

    op.create_table(
        "role_permissions",
        _pk(),
        sa.Column("role", sa.Text(), nullable=False),
        sa.Column("permission_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["permission_id"], ["permissions.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("role", "permission_id", name="uq_role_permissions_role_permission"),
    )
    op.create_index("ix_role_permissions_role", "role_permissions", ["role"])

    op.create_table(
        "user_permissions",
        _pk(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("permission_id", sa.Integer(), nullable=False),
        sa.Column("granted", sa.Boolean(), server_default=TRUE, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["permission_id"], ["permissions.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "permission_id", name="uq_user_permissions_user_permission"),
    )
    op.create_index("ix_user_permissions_user_id", "user_permissions", ["user_id"])

    op.create_table(
        "login_logs",
        _pk(),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("ip_address", sa.Text(), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("device_type", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        sa.Column("login_time", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        _user_fk("user_id", "login_logs"),
    )
    op.create_index("ix_login_logs_user_id", "login_logs", ["user_id"])
    op.create_index("ix_login_logs_login_time", "login_logs", ["login_time"])

    op.create_table(
        "audit_logs",
        _pk(),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("user_email", sa.Text(), nullable=True),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("resource", sa.Text(), nullable=False),
        sa.Column("resource_id", sa.Text(), nullable=True),
        sa.Column("details", JSON, nullable=True),
        sa.Column("old_values", JSON, nullable=True),
        sa.Column("new_values", JSON, nullable=True),
        sa.Column("ip_address", sa.Text(), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), server_default="success", nullable=False),
        sa.Column("correlation_id", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        _user_fk("user_id", "audit_logs"),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_resource", "audit_logs", ["resource"])
    op.create_index("ix_audit_logs_timestamp", "audit_logs", ["timestamp"])

    # CATALOG
    op.create_table(
        "categories",
        _pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_categories_name"),
    )

    op.create_table(
        "units",
        _pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("abbreviation", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("base_unit", sa.Text(), nullable=True),
        sa.Column("conversion_factor", sa.Numeric(18, 6), server_default="1", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=TRUE, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_units_name"),
        sa.UniqueConstraint("abbreviation", name="uq_units_abbreviation"),
    )

    op.create_table(
        "unit_conversions",
        _pk(),
        sa.Column("from_unit_id", sa.Integer(), nullable=False),
        sa.Column("to_unit_id", sa.Integer(), nullable=False),
        sa.Column("conversion_factor", sa.Numeric(18, 6), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=TRUE, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["from_unit_id"], ["units.id"], ondelete="CASCADE",
                                name="fk_unit_conversions_from_unit_id_units"),
        sa.ForeignKeyConstraint(["to_unit_id"], ["units.id"], ondelete="CASCADE",
                                name="fk_unit_conversions_to_unit_id_units"),
        sa.UniqueConstraint("from_unit_id", "to_unit_id", name="uq_unit_conversions_from_to"),
    )

    # INVENTORY
    op.create_table(
        "inventory_categories",
        _pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_inventory_categories_name"),
    )

    op.create_table(
        "inventory_items",
        _pk(),
        sa.Column("inv_code", sa.Text(), nullable=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("unit", sa.Text(), nullable=False),
        sa.Column("opening_stock", sa.Numeric(18, 3), server_default="0", nullable=False),
        sa.Column("current_stock", sa.Numeric(18, 3), server_default="0", nullable=False),
        sa.Column("min_level", sa.Numeric(18, 3), server_default="0", nullable=False),
        sa.Column("cost_per_unit", sa.Numeric(12, 4), server_default="0", nullable=False),
        sa.Column("supplier", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("last_restocked", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["category_id"], ["inventory_categories.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("inv_code", name="uq_inventory_items_inv_code"),
    )

    op.create_table(
        "inventory_transactions",
        _pk(),
        sa.Column("inventory_item_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("reference", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"], ondelete="CASCADE"),
        _user_fk("created_by", "inventory_transactions"),
    )
    op.create_index(
        "ix_inventory_transactions_inventory_item_id", "inventory_transactions", ["inventory_item_id"]
    )

    op.create_table(
        "products",
        _pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sku", sa.Text(), nullable=True),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("margin", sa.Numeric(7, 2), nullable=True),
        sa.Column("unit", sa.Text(), server_default="pcs", nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=TRUE, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("sku", name="uq_products_sku"),
    )

    op.create_table(
        "product_ingredients",
        _pk(),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("inventory_item_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Numeric(18, 6), nullable=False),
        sa.Column("unit", sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_product_ingredients_product_id", "product_ingredients", ["product_id"])

    # SALES
    op.create_table(
        "customers",
        _pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("opening_balance", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("current_balance", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("total_orders", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_spent", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=TRUE, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "orders",
        _pk(),
        sa.Column("order_number", sa.Text(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        sa.Column("customer_name", sa.Text(), nullable=False),
        sa.Column("customer_email", sa.Text(), nullable=True),
        sa.Column("customer_phone", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("status", sa.Text(), server_default="pending", nullable=False),
        sa.Column("payment_method", sa.Text(), nullable=True),
        sa.Column("delivery_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("source", sa.Text(), server_default="staff", nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="SET NULL"),
        _user_fk("created_by", "orders"),
        sa.UniqueConstraint("order_number", name="uq_orders_order_number"),
    )
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])

    op.create_table(
        "order_items",
        _pk(),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=True),
        sa.Column("quantity", sa.Numeric(14, 3), nullable=False),
        sa.Column("unit", sa.Text(), nullable=True),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(14, 2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    # PROCUREMENT
    op.create_table(
        "parties",
        _pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), server_default="supplier", nullable=False),
        sa.Column("contact_person", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("tax_id", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("opening_balance", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("current_balance", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=TRUE, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "purchases",
        _pk(),
        sa.Column("party_id", sa.Integer(), nullable=True),
        sa.Column("supplier_name", sa.Text(), nullable=False),
        sa.Column("invoice_number", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("payment_method", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), server_default="completed", nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["party_id"], ["parties.id"], ondelete="SET NULL"),
        _user_fk("created_by", "purchases"),
    )
    op.create_index("ix_purchases_party_id", "purchases", ["party_id"])

    op.create_table(
        "purchase_items",
        _pk(),
        sa.Column("purchase_id", sa.Integer(), nullable=False),
        sa.Column("inventory_item_id", sa.Integer(), nullable=True),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("unit", sa.Text(), nullable=True),
        sa.Column("unit_price", sa.Numeric(12, 4), nullable=False),
        sa.Column("total_price", sa.Numeric(14, 2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["purchase_id"], ["purchases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_purchase_items_purchase_id", "purchase_items", ["purchase_id"])

    # LEDGER
    op.create_table(
        "ledger_transactions",
        _pk(),
        sa.Column("entity_type", sa.Text(), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("reference_number", sa.Text(), nullable=True),
        sa.Column("debit_amount", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("credit_amount", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("running_balance", sa.Numeric(14, 2), server_default="0", nullable=False),
        sa.Column("transaction_type", sa.Text(), nullable=False),
        sa.Column("related_order_id", sa.Integer(), nullable=True),
        sa.Column("related_purchase_id", sa.Integer(), nullable=True),
        sa.Column("payment_method", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["related_order_id"], ["orders.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["related_purchase_id"], ["purchases.id"], ondelete="SET NULL"),
        _user_fk("created_by", "ledger_transactions"),
    )
    op.create_index(
        "ix_ledger_transactions_entity",
        "ledger_transactions",
        ["entity_type", "entity_id", "transaction_date"],
    )

    # PRODUCTION
    op.create_table(
        "production_schedule",
        _pk(),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Numeric(14, 3), nullable=False),
        sa.Column("target_quantity", sa.Numeric(14, 3), nullable=True),
        sa.Column("target_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("target_packets", sa.Integer(), nullable=True),
        sa.Column("unit", sa.Text(), server_default="kg", nullable=False),
        sa.Column("priority", sa.Text(), server_default="medium", nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("status", sa.Text(), server_default="pending", nullable=False),
        sa.Column("assigned_to", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        _user_fk("assigned_to", "production_schedule"),
    )
    op.create_index("ix_production_schedule_product_id", "production_schedule", ["product_id"])
    op.create_index("ix_production_schedule_scheduled_date", "production_schedule", ["scheduled_date"])

    # STAFF
    op.create_table(
        "staff",
        _pk(),
        sa.Column("staff_code", sa.Text(), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=False),
        sa.Column("position", sa.Text(), nullable=False),
        sa.Column("department", sa.Text(), nullable=False),
        sa.Column("employment_type", sa.Text(), server_default="full_time", nullable=False),
        sa.Column("salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("bank_account", sa.Text(), nullable=True),
        sa.Column("emergency_contact", sa.Text(), nullable=True),
        sa.Column("emergency_phone", sa.Text(), nullable=True),
        sa.Column("documents", JSON, nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), server_default="active", nullable=False),
        sa.Column("termination_date", sa.Date(), nullable=True),
        sa.Column("termination_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("staff_code", name="uq_staff_staff_code"),
    )

    op.create_table(
        "attendance",
        _pk(),
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("work_date", sa.Date(), nullable=False),
        sa.Column("clock_in", sa.DateTime(timezone=True), nullable=True),
        sa.Column("clock_out", sa.DateTime(timezone=True), nullable=True),
        sa.Column("break_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("break_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_hours", sa.Numeric(6, 2), nullable=True),
        sa.Column("overtime_hours", sa.Numeric(6, 2), nullable=True),
        sa.Column("status", sa.Text(), server_default="present", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["staff_id"], ["staff.id"], ondelete="CASCADE"),
        _user_fk("approved_by", "attendance"),
        sa.UniqueConstraint("staff_id", "work_date", name="uq_attendance_staff_work_date"),
    )
    op.create_index("ix_attendance_staff_id", "attendance", ["staff_id"])

    op.create_table(
        "salary_payments",
        _pk(),
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("pay_period_start", sa.Date(), nullable=False),
        sa.Column("pay_period_end", sa.Date(), nullable=False),
        sa.Column("basic_salary", sa.Numeric(12, 2), nullable=False),
        sa.Column("overtime_pay", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("bonus", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("allowances", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("deductions", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("tax", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("net_pay", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("payment_method", sa.Text(), server_default="bank_transfer", nullable=False),
        sa.Column("status", sa.Text(), server_default="pending", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("processed_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["staff_id"], ["staff.id"], ondelete="CASCADE"),
        _user_fk("processed_by", "salary_payments"),
    )
    op.create_index("ix_salary_payments_staff_id", "salary_payments", ["staff_id"])

    op.create_table(
        "leave_requests",
        _pk(),
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("leave_type", sa.Text(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("total_days", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), server_default="pending", nullable=False),
        sa.Column("reviewed_by", sa.Integer(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_comments", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["staff_id"], ["staff.id"], ondelete="CASCADE"),
        _user_fk("reviewed_by", "leave_requests"),
    )
    op.create_index("ix_leave_requests_staff_id", "leave_requests", ["staff_id"])

    op.create_table(
        "staff_schedules",
        _pk(),
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("shift_date", sa.Date(), nullable=False),
        sa.Column("shift_start", sa.Time(), nullable=False),
        sa.Column("shift_end", sa.Time(), nullable=False),
        sa.Column("position", sa.Text(), nullable=True),
        sa.Column("department", sa.Text(), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), server_default=FALSE, nullable=False),
        sa.Column("recurring_pattern", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["staff_id"], ["staff.id"], ondelete="CASCADE"),
        _user_fk("created_by", "staff_schedules"),
    )
    op.create_index("ix_staff_schedules_staff_id", "staff_schedules", ["staff_id"])

    # FINANCE
    op.create_table(
        "expenses",
        _pk(),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.Column("payment_method", sa.Text(), nullable=True),
        sa.Column("vendor", sa.Text(), nullable=True),
        sa.Column("receipt_url", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        _user_fk("created_by", "expenses"),
    )
    op.create_index("ix_expenses_expense_date", "expenses", ["expense_date"])

    op.create_table(
        "assets",
        _pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("purchase_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("current_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("condition", sa.Text(), server_default="good", nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=TRUE, nullable=False),
        *_timestamps(),
    )

    # SYSTEM
    op.create_table(
        "settings",
        _pk(),
        sa.Column("key", sa.Text(), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("type", sa.Text(), server_default="string", nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("key", name="uq_settings_key"),
    )

    op.create_table(
        "notifications",
        _pk(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("priority", sa.Text(), server_default="medium", nullable=False),
        sa.Column("subject", sa.Text(), nullable=True),
        sa.Column("data", JSON, nullable=True),
        sa.Column("is_read", sa.Boolean(), server_default=FALSE, nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "notification_preferences",
        _pk(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("rules", JSON, nullable=True),
        sa.Column("push_subscription", JSON, nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", name="uq_notification_preferences_user_id"),
    )


def downgrade() -> None:
    for table in [
        "notification_preferences",
        "notifications",
        "settings",
        "assets",
        "expenses",
        "staff_schedules",
        "leave_requests",
        "salary_payments",
        "attendance",
        "staff",
        "production_schedule",
        "ledger_transactions",
        "purchase_items",
        "purchases",
        "parties",
        "order_items",
        "orders",
        "customers",
        "product_ingredients",
        "products",
        "inventory_transactions",
        "inventory_items",
        "inventory_categories",
        "unit_conversions",
        "units",
        "categories",
        "audit_logs",
        "login_logs",
        "user_permissions",
        "role_permissions",
        "permissions",
        "users",
    ]:
        op.drop_table(table)
