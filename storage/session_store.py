"""
Per-session relational stores.

Every analysis session gets its own in-memory SQLite database. The registry
owns those databases and gives them an explicit create/get/destroy lifecycle;
it is attached to the Flask app rather than living at module level.
"""
import logging
import threading
import pandas as pd
from sqlalchemy import Boolean, Float, Integer, Text, create_engine
from sqlalchemy.pool import StaticPool
from analyzers.schema import Column
from compilers.identifiers import sanitize_identifier


def _unique_names(names):
    """Sanitize column names, suffixing repeats so they stay distinct"""
    seen = {}
    result = []
    for name in names:
        clean = sanitize_identifier(name) or 'column'
        if clean in seen:
            seen[clean] += 1
            clean = f"{clean}_{seen[clean]}"
        else:
            seen[clean] = 1
        result.append(clean)
    return result


def _sql_type(series):
    if pd.api.types.is_bool_dtype(series):
        return Boolean()
    if pd.api.types.is_integer_dtype(series):
        return Integer()
    if pd.api.types.is_float_dtype(series):
        return Float()
    return Text()


class SessionStore:
    """One in-memory SQLite database holding a session's uploaded tables"""

    def __init__(self, session_id):
        self.session_id = session_id
        self.engine = create_engine(
            'sqlite://',
            poolclass=StaticPool,
            connect_args={'check_same_thread': False},
        )
        self.tables = set()
        self._lock = threading.Lock()

    def load_dataframe(self, table_name, df):
        """Create (or replace) a table from a DataFrame; returns the stored table name"""
        name = sanitize_identifier(table_name) or 'table'
        df = df.copy()
        df.columns = _unique_names(df.columns)
        dtypes = {col: _sql_type(df[col]) for col in df.columns}

        with self._lock:
            df.to_sql(name, self.engine, if_exists='replace', index=False, dtype=dtypes)
            self.tables.add(name)

        logging.info(f"Loaded {len(df)} rows into {name} for session {self.session_id}")
        return name

    def list_tables(self):
        rows = self.execute(
            "SELECT name FROM sqlite_master WHERE type='table' "
            "AND name NOT LIKE 'sqlite_%' ORDER BY name;"
        )
        return [row['name'] for row in rows]

    def read_schema(self):
        """Introspect every table into an ordered table -> [Column] mapping"""
        schema = {}
        for table in self.list_tables():
            info = self.execute(f'PRAGMA table_info("{sanitize_identifier(table)}");')
            schema[table] = [
                Column(
                    name=c['name'],
                    type=c['type'] or '',
                    primary_key=bool(c['pk']),
                    not_null=bool(c['notnull']),
                    default_value=c['dflt_value'],
                )
                for c in info
            ]
        return schema

    def sample_rows(self, table_name, limit):
        """First `limit` rows of a table in storage order"""
        table = sanitize_identifier(table_name)
        return self.execute(f"SELECT * FROM {table} LIMIT ?;", [int(limit)])

    def sample_all(self, schema, limit):
        """Bounded sample of every table; unreadable tables sample as empty"""
        data = {}
        for table in schema:
            try:
                data[table] = self.sample_rows(table, limit)
            except Exception as e:
                logging.warning(f"Could not fetch data from {table}: {str(e)}")
                data[table] = []
        return data

    def execute(self, sql, params=None):
        """Run one statement with positional parameters and return rows as dicts"""
        with self._lock, self.engine.connect() as conn:
            result = conn.exec_driver_sql(sql, tuple(params or ()))
            if not result.returns_rows:
                conn.commit()
                return []
            return [dict(row) for row in result.mappings()]

    def close(self):
        self.engine.dispose()


class SessionStoreRegistry:
    """Keyed registry of session stores with explicit lifecycle"""

    def __init__(self, store_factory=SessionStore):
        self._store_factory = store_factory
        self._stores = {}
        self._lock = threading.Lock()

    def create(self, session_id):
        """Create a fresh store, replacing any existing one for the session"""
        with self._lock:
            existing = self._stores.pop(session_id, None)
            store = self._store_factory(session_id)
            self._stores[session_id] = store
        if existing is not None:
            existing.close()
        return store

    def get(self, session_id):
        with self._lock:
            return self._stores.get(session_id)

    def get_or_create(self, session_id):
        with self._lock:
            store = self._stores.get(session_id)
            if store is None:
                store = self._store_factory(session_id)
                self._stores[session_id] = store
            return store

    def destroy(self, session_id):
        """Close and forget a session's store; returns whether one existed"""
        with self._lock:
            store = self._stores.pop(session_id, None)
        if store is None:
            return False
        store.close()
        return True

    def close_all(self):
        with self._lock:
            stores = list(self._stores.values())
            self._stores.clear()
        for store in stores:
            store.close()

    def __contains__(self, session_id):
        with self._lock:
            return session_id in self._stores

    def __len__(self):
        with self._lock:
            return len(self._stores)
