# #Data Store
# Key-value access layer over one SQLite table per logical store.

# Responsibilities:
# - create (or overwrite) a JSON document by its id or an explicit row key
# - fetch one document by id
# - list documents whose top-level fields equal a filter

# Three stores are used: "items" (parsed records), "cids" (per-item CIDs),
# "proofs" (per-round proof CIDs).

import json
import re
from datetime import datetime, timezone
from crawler.storage.db import get_connection, initialize_table, check_table_name

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def now():
  return datetime.now(timezone.utc).isoformat()


class DataStore:
    def __init__(self, name, db_path=None):
        self.name = check_table_name(name)
        self.db_path = db_path
        initialize_table(name, db_path)

    def create(self, record, key=None):
        # Rows are keyed by `key`, defaulting to the document id; a repeated key overwrites
        if "id" not in record:
            raise ValueError(f"{self.name}: record has no id")
        key = record["id"] if key is None else key
        conn = get_connection(self.db_path)
        cursor = conn.cursor()
        cursor.execute(f"""
        INSERT INTO {self.name} (id, body, created_at)
        VALUES (?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
        body=excluded.body;
        """,
        (str(key), json.dumps(record, sort_keys=True), now())
        )
        conn.commit()
        cursor.close()
        conn.close()
        return record

    def get_item(self, item_id):
        conn = get_connection(self.db_path)
        cursor = conn.cursor()
        cursor.execute(f"SELECT body FROM {self.name} WHERE id = ?", (str(item_id),))
        row = cursor.fetchone()
        cursor.close()
        conn.close()
        return json.loads(row[0]) if row else None

    def get_list(self, filter=None):
        # Returned in insertion order
        clauses = []
        params = []
        for key, value in (filter or {}).items():
            if not _FIELD_NAME.match(key):
                raise ValueError(f"{self.name}: invalid filter field {key!r}")
            clauses.append(f"json_extract(body, '$.{key}') = ?")
            params.append(value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        conn = get_connection(self.db_path)
        cursor = conn.cursor()
        cursor.execute(f"SELECT body FROM {self.name} {where} ORDER BY rowid", params)
        rows = cursor.fetchall()
        cursor.close()
        conn.close()
        return [json.loads(row[0]) for row in rows]
