"""Column types shared by the SQLite (tests, local) and PostgreSQL deployments."""
from sqlalchemy import JSON, Uuid

# Audit payloads; plain JSON so the same schema runs on SQLite
JSONType = JSON

# Native UUID on PostgreSQL, CHAR(32) on SQLite
UUIDType = Uuid(as_uuid=True)
