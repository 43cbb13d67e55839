# SQL schema for the LearningMate record stores

SCHEMA_VERSION = 1

# One table per record store. Values are JSON documents; there are no
# foreign keys or triggers between tables.
STORE_TABLES = ("files", "problems", "progress", "settings")

SCHEMA_SQL = "\n".join(
    f"""
CREATE TABLE IF NOT EXISTS {table} (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""
    for table in STORE_TABLES
)
