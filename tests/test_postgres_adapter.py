import os

import pytest

from dbvalidator.sql.platform import PostgresPlatform

DSN = os.getenv("DBV_TEST_POSTGRES_DSN")

pytestmark = pytest.mark.skipif(not DSN, reason="DBV_TEST_POSTGRES_DSN not set")


@pytest.fixture
def pg_table():
    import psycopg

    with psycopg.connect(DSN, autocommit=True) as conn:
        conn.execute("DROP TABLE IF EXISTS dbv_users")
        conn.execute("CREATE TABLE dbv_users(id INT PRIMARY KEY, email TEXT)")
        conn.execute("INSERT INTO dbv_users VALUES (1, 'alice@example.com')")
    yield "dbv_users"
    with psycopg.connect(DSN, autocommit=True) as conn:
        conn.execute("DROP TABLE IF EXISTS dbv_users")


def test_postgres_record_lookup(pg_table):
    from adapters.db.postgres_adapter import PostgresAdapter
    from dbvalidator.record_exists import NoRecordExists, RecordExists

    adapter = PostgresAdapter(DSN)
    assert isinstance(adapter.platform, PostgresPlatform)

    assert RecordExists(table=pg_table, field="email", adapter=adapter).is_valid(
        "alice@example.com"
    )
    v = NoRecordExists(
        table=pg_table,
        schema="public",
        field="email",
        exclude={"field": "id", "value": 1},
        adapter=adapter,
    )
    assert v.is_valid("alice@example.com")


def test_postgres_rejects_non_select():
    from adapters.db.postgres_adapter import PostgresAdapter

    with pytest.raises(ValueError):
        PostgresAdapter(DSN).execute("DROP TABLE x")
