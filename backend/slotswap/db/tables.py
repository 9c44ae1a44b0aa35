"""
Single source of truth for database tables that exist after migrations (001).

Use these names when writing raw SQL (e.g. TRUNCATE). Order matters for FK: dependents first.
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = (
    "swap_requests",
    "slots",
    "users",
)

# Tables cleared by admin_service.reset_negotiations (slots keep their owners; requests go).
NEGOTIATION_TABLE_NAMES = (
    "swap_requests",
)
