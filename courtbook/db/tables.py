"""
Single source of truth for database tables that exist after migrations.

Use these names when writing raw SQL (e.g. TRUNCATE). Order is child-first so deletes respect references.
"""
ALL_TABLE_NAMES = (
    "reservations",
    "courts",
    "time_windows",
)
