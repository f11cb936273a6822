FILES_SCHEMA = """
CREATE TABLE IF NOT EXISTS files (
    id TEXT PRIMARY KEY,
    original_name TEXT NOT NULL,
    mime_type TEXT NOT NULL,
    size_bytes BIGINT NOT NULL,
    source_path TEXT NOT NULL,
    processed_path TEXT,
    preview_path TEXT,
    state TEXT NOT NULL,
    payment_state SMALLINT NOT NULL DEFAULT 0 CHECK (payment_state IN (-1, 0, 1)),
    algorithm TEXT,
    custom_payload TEXT,
    algorithm_result JSONB,
    payment_order_id TEXT,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL
);
CREATE INDEX IF NOT EXISTS files_created_at_idx ON files (created_at);
"""

FILE_COLUMNS = (
    "id",
    "original_name",
    "mime_type",
    "size_bytes",
    "source_path",
    "processed_path",
    "preview_path",
    "state",
    "payment_state",
    "algorithm",
    "custom_payload",
    "algorithm_result",
    "payment_order_id",
    "created_at",
    "updated_at",
)
