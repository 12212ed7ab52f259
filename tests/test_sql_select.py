import pytest

from dbvalidator.errors.exceptions import InvalidArgumentError
from dbvalidator.sql.platform import (
    PostgresPlatform,
    Sql92Platform,
    SqlitePlatform,
    platform_for,
)
from dbvalidator.sql.predicates import Expression, Operator, Where
from dbvalidator.sql.select import Select, TableIdentifier


def _lookup_select() -> Select:
    s = Select()
    s.from_(TableIdentifier("users", "my")).columns(["field1"])
    s.where.equal_to("field1", "")
    s.where.not_equal_to("foo", "bar")
    return s


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def test_sql_string_inlines_values():
    assert _lookup_select().get_sql_string(Sql92Platform()) == (
        'SELECT "my"."users"."field1" AS "field1" FROM "my"."users" '
        "WHERE \"field1\" = '' AND \"foo\" <> 'bar'"
    )


def test_prepare_binds_named_parameters_in_order():
    stmt = _lookup_select().prepare(Sql92Platform())
    assert stmt.sql == (
        'SELECT "my"."users"."field1" AS "field1" FROM "my"."users" '
        'WHERE "field1" = ? AND "foo" <> ?'
    )
    assert dict(stmt.parameters) == {"where1": "", "where2": "bar"}
    assert stmt.values() == ["", "bar"]


def test_prepare_uses_postgres_placeholders():
    stmt = _lookup_select().prepare(PostgresPlatform())
    assert stmt.sql.endswith('WHERE "field1" = %s AND "foo" <> %s')


def test_rendering_is_repeatable():
    s = _lookup_select()
    first = s.prepare(SqlitePlatform())
    second = s.prepare(SqlitePlatform())
    assert first.sql == second.sql
    assert dict(first.parameters) == dict(second.parameters)
    assert s.where.count() == 2


def test_table_without_schema():
    s = Select("users").columns(["email"])
    assert s.get_sql_string(Sql92Platform()) == (
        'SELECT "users"."email" AS "email" FROM "users"'
    )


def test_star_columns_by_default():
    assert Select("users").get_sql_string(Sql92Platform()) == (
        'SELECT "users".* FROM "users"'
    )


def test_quoting_escapes_embedded_quotes():
    s = Select('we"ird').columns(["name"])
    s.where.equal_to("name", "O'Brien")
    assert s.get_sql_string(Sql92Platform()) == (
        'SELECT "we""ird"."name" AS "name" FROM "we""ird" '
        "WHERE \"name\" = 'O''Brien'"
    )


@pytest.mark.parametrize(
    "value, rendered",
    [(None, "NULL"), (True, "TRUE"), (False, "FALSE"), (42, "42"), (1.5, "1.5")],
)
def test_inlined_scalar_literals(value, rendered):
    s = Select("users")
    s.where.equal_to("v", value)
    assert s.get_sql_string(Sql92Platform()).endswith(f'WHERE "v" = {rendered}')


def test_dotted_identifier_is_split():
    s = Select("users")
    s.where.add_predicate(Operator("u.id", "=", 1))
    assert s.get_sql_string(Sql92Platform()).endswith('WHERE "u"."id" = 1')


# ---------------------------------------------------------------------------
# add_where forms
# ---------------------------------------------------------------------------


def test_add_where_string_is_literal_expression():
    s = Select("users").add_where("id != 1")
    assert s.get_sql_string(Sql92Platform()).endswith("WHERE id <> 1")
    assert dict(s.prepare(Sql92Platform()).parameters) == {}


def test_add_where_expression_with_parameters():
    s = Select("users")
    s.where.equal_to("email", "")
    s.add_where(Expression("id IN (?, ?)", 4, 5))
    stmt = s.prepare(SqlitePlatform())
    assert stmt.sql.endswith('WHERE "email" = ? AND id IN (?, ?)')
    assert dict(stmt.parameters) == {"where1": "", "where2": 4, "where3": 5}


def test_add_where_callable_receives_where():
    s = Select("users").add_where(lambda where: where.not_equal_to("id", 5))
    assert s.get_sql_string(Sql92Platform()).endswith('WHERE "id" <> 5')


def test_add_where_mapping_adds_equalities():
    s = Select("users").add_where({"active": 1, "role": "admin"})
    assert s.get_sql_string(Sql92Platform()).endswith(
        "WHERE \"active\" = 1 AND \"role\" = 'admin'"
    )


def test_add_where_mapping_none_is_null_check():
    s = Select("users").add_where({"username": None, "role": "admin"})
    stmt = s.prepare(SqlitePlatform())
    assert stmt.sql.endswith('WHERE "username" IS NULL AND "role" = ?')
    assert stmt.values() == ["admin"]


def test_where_is_null():
    s = Select("users")
    s.where.is_null("deleted_at")
    assert s.get_sql_string(Sql92Platform()).endswith('WHERE "deleted_at" IS NULL')


def test_nested_where_is_parenthesized():
    s = Select("users")
    s.where.equal_to("email", "x")
    s.add_where(Where([Operator("a", "=", 1), Operator("b", "=", 2)]))
    assert s.get_sql_string(Sql92Platform()).endswith(
        'WHERE "email" = \'x\' AND ("a" = 1 AND "b" = 2)'
    )


def test_postgres_escapes_percent_in_raw_fragments():
    s = Select("users")
    s.where.equal_to("email", "x")
    s.add_where("username LIKE 'adm%'")
    stmt = s.prepare(PostgresPlatform())
    assert stmt.sql.endswith("WHERE \"email\" = %s AND username LIKE 'adm%%'")


def test_postgres_escapes_percent_in_identifiers():
    s = Select("users").columns(["pct%"])
    s.where.equal_to("pct%", "")
    stmt = s.prepare(PostgresPlatform())
    assert stmt.sql == (
        'SELECT "users"."pct%%" AS "pct%%" FROM "users" WHERE "pct%%" = %s'
    )
    assert stmt.values() == [""]


def test_percent_is_left_alone_outside_postgres():
    s = Select("users").columns(["pct%"])
    s.where.equal_to("pct%", "")
    assert s.prepare(SqlitePlatform()).sql == (
        'SELECT "users"."pct%" AS "pct%" FROM "users" WHERE "pct%" = ?'
    )


def test_question_mark_in_identifier_is_not_a_placeholder():
    s = Select("users").columns(["why?"])
    s.where.equal_to("why?", "x")
    stmt = s.prepare(PostgresPlatform())
    assert stmt.sql.endswith('WHERE "why?" = %s')
    assert stmt.values() == ["x"]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def test_select_without_table_raises():
    with pytest.raises(InvalidArgumentError):
        Select().get_sql_string(Sql92Platform())


def test_unsupported_where_clause_raises():
    with pytest.raises(InvalidArgumentError):
        Select("users").add_where(123)  # type: ignore[arg-type]


def test_expression_parameter_count_mismatch():
    with pytest.raises(InvalidArgumentError):
        Expression("a = ? AND b = ?", 1)


def test_unparseable_expression_raises():
    with pytest.raises(InvalidArgumentError):
        Expression("(id = 1")


def test_unknown_operator_raises():
    with pytest.raises(InvalidArgumentError):
        Operator("id", "LIKE", "x")


def test_unknown_dialect_raises():
    with pytest.raises(InvalidArgumentError):
        platform_for("oracle")


def test_platform_for_known_dialects():
    assert isinstance(platform_for("SQLite"), SqlitePlatform)
    assert isinstance(platform_for("postgresql"), PostgresPlatform)


def test_table_identifier_roundtrip():
    t = TableIdentifier("users", "my")
    assert t.get_table_and_schema() == ("users", "my")
    assert TableIdentifier("users").get_schema() is None
    with pytest.raises(InvalidArgumentError):
        TableIdentifier("")
