SCHEMA_SQL = r"""
-- Key/value snapshots (one row per storage key, value is the full JSON document)
CREATE TABLE IF NOT EXISTS kv_store (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL,
  updated_at TEXT NOT NULL DEFAULT ''    -- ISO datetime of the last save
);
"""
