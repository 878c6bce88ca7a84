"""Unit tests for the generic parameterized query builder."""

import pytest

from dblib.common.exceptions import (
    InvalidArgumentError,
    InvalidIdentifierError,
    PlaceholderCollisionError,
)
from dblib.protocols import StatementBuilder
from dblib.query_builder import QueryBuilder


@pytest.fixture
def builder():
    return QueryBuilder("users")


class TestSelect:
    """SELECT rendering and clause order."""

    def test_default_select(self, builder):
        assert builder.build_select() == "SELECT * FROM users"
        assert builder.get_params() == {}

    def test_single_where(self, builder):
        builder.where("id", "=", 5)

        assert builder.build_select() == "SELECT * FROM users WHERE id = :id_0"
        assert builder.get_params() == {"id_0": 5}

    def test_full_chain(self, builder):
        sql = (
            builder.select(["id", "email"])
            .where("status", "=", "active")
            .where("age", ">=", 18)
            .order_by("created_at", "desc")
            .limit(10)
            .offset(20)
            .build_select()
        )

        assert sql == (
            "SELECT id, email FROM users WHERE status = :status_0 AND age >= :age_1 "
            "ORDER BY created_at DESC LIMIT 10 OFFSET 20"
        )
        assert builder.get_params() == {"status_0": "active", "age_1": 18}

    def test_clause_order_is_fixed(self, builder):
        builder.offset(5).limit(10).order_by("users.name").group_by("users.name")
        builder.where("orders.total", ">", 100)
        builder.join("orders", "users.id = orders.user_id", "left")
        builder.select(["users.name"])

        assert builder.build_select() == (
            "SELECT users.name FROM users LEFT JOIN orders ON users.id = orders.user_id "
            "WHERE orders.total > :orders_total_0 GROUP BY users.name "
            "ORDER BY users.name ASC LIMIT 10 OFFSET 5"
        )
        assert builder.get_params() == {"orders_total_0": 100}

    def test_multiple_joins_keep_call_order(self, builder):
        builder.join("orders", "users.id = orders.user_id")
        builder.join("payments", "orders.id = payments.order_id", "full outer")

        assert builder.build_select() == (
            "SELECT * FROM users INNER JOIN orders ON users.id = orders.user_id "
            "FULL OUTER JOIN payments ON orders.id = payments.order_id"
        )

    def test_group_by_accumulates(self, builder):
        builder.select(["status", "country"]).group_by("status").group_by("country")

        assert builder.build_select() == "SELECT status, country FROM users GROUP BY status, country"

    def test_select_replaces_previous_list(self, builder):
        builder.select(["id"]).select(["email"])

        assert builder.build_select() == "SELECT email FROM users"

    def test_select_keeps_wildcard(self, builder):
        assert builder.select(["*"]).build_select() == "SELECT * FROM users"

    def test_empty_select_list_is_rejected(self, builder):
        with pytest.raises(InvalidArgumentError):
            builder.select([])

    def test_zero_limit_and_offset_are_rendered(self, builder):
        assert builder.limit(0).offset(0).build_select() == "SELECT * FROM users LIMIT 0 OFFSET 0"

    @pytest.mark.parametrize("value", [-1, True, "10", 1.5, None])
    def test_invalid_limit_is_rejected(self, builder, value):
        with pytest.raises(InvalidArgumentError):
            builder.limit(value)

    @pytest.mark.parametrize("value", [-5, False, "0"])
    def test_invalid_offset_is_rejected(self, builder, value):
        with pytest.raises(InvalidArgumentError):
            builder.offset(value)


class TestWhere:
    """Predicates and their placeholders."""

    def test_same_column_twice_gets_distinct_placeholders(self, builder):
        builder.where("age", ">", 18).where("age", "<", 65)

        assert builder.build_select() == "SELECT * FROM users WHERE age > :age_0 AND age < :age_1"
        assert builder.get_params() == {"age_0": 18, "age_1": 65}

    def test_values_never_enter_sql(self, builder):
        builder.where("name", "=", "x' OR '1'='1")
        sql = builder.build_select()

        assert "OR" not in sql
        assert builder.get_params() == {"name_0": "x' OR '1'='1"}

    def test_dotted_column_placeholder(self, builder):
        builder.where("users.id", "=", 1)

        assert builder.build_select() == "SELECT * FROM users WHERE users.id = :users_id_0"

    def test_operator_is_upper_cased(self, builder):
        builder.where("name", "ilike", "%ada%")

        assert builder.build_select() == "SELECT * FROM users WHERE name ILIKE :name_0"

    @pytest.mark.parametrize("operator", ["IS NULL", "is not null"])
    def test_null_operators_bind_nothing(self, builder, operator):
        builder.where("deleted_at", operator)

        assert builder.build_select() == f"SELECT * FROM users WHERE deleted_at {operator.upper()}"
        assert builder.get_params() == {}

    def test_in_operator_expands_sequence(self, builder):
        builder.where("id", "IN", [1, 2])

        assert builder.build_select() == "SELECT * FROM users WHERE id IN (:id_in_0, :id_in_1)"
        assert builder.get_params() == {"id_in_0": 1, "id_in_1": 2}

    def test_not_in_operator(self, builder):
        builder.where("status", "not in", ("banned", "deleted"))

        assert builder.build_select() == (
            "SELECT * FROM users WHERE status NOT IN (:status_in_0, :status_in_1)"
        )

    def test_where_in(self, builder):
        builder.where_in("id", [1, 2, 3]).where("status", "=", "active")

        assert builder.build_select() == (
            "SELECT * FROM users WHERE id IN (:id_in_0, :id_in_1, :id_in_2) AND status = :status_3"
        )
        assert builder.get_params() == {
            "id_in_0": 1,
            "id_in_1": 2,
            "id_in_2": 3,
            "status_3": "active",
        }

    def test_where_in_twice_on_same_column(self, builder):
        builder.where_in("id", [1, 2]).where_in("id", [3])

        assert builder.build_select() == (
            "SELECT * FROM users WHERE id IN (:id_in_0, :id_in_1) AND id IN (:id_in_2)"
        )

    def test_empty_in_list_is_rejected(self, builder):
        with pytest.raises(InvalidArgumentError, match="at least one value"):
            builder.where_in("id", [])

    @pytest.mark.parametrize("values", ["abc", b"abc", {"a": 1}, 5])
    def test_in_requires_a_sequence(self, builder, values):
        with pytest.raises(InvalidArgumentError, match="sequence"):
            builder.where("id", "IN", values)

    def test_invalid_operator_leaves_builder_untouched(self, builder):
        builder.where("id", "=", 1)

        with pytest.raises(InvalidArgumentError):
            builder.where("name", "; DROP TABLE users", "x")

        assert builder.build_select() == "SELECT * FROM users WHERE id = :id_0"
        assert builder.get_params() == {"id_0": 1}

    def test_invalid_column_is_rejected(self, builder):
        with pytest.raises(InvalidIdentifierError):
            builder.where("'; --", "=", 1)


class TestJoinAndOrder:

    def test_invalid_join_type(self, builder):
        with pytest.raises(InvalidArgumentError):
            builder.join("orders", "users.id = orders.user_id", "CROSS")

    def test_invalid_join_condition(self, builder):
        with pytest.raises(InvalidArgumentError):
            builder.join("orders", "users.id = orders.user_id OR 1=1")

        assert builder.state.join_clauses == []

    def test_join_table_is_sanitized(self, builder):
        builder.join("orders;--", "users.id = orders.user_id")

        assert builder.build_select() == "SELECT * FROM users INNER JOIN orders ON users.id = orders.user_id"

    def test_order_by_default_direction(self, builder):
        builder.order_by("name").order_by("id", "DESC")

        assert builder.build_select() == "SELECT * FROM users ORDER BY name ASC, id DESC"

    def test_invalid_direction(self, builder):
        with pytest.raises(InvalidArgumentError):
            builder.order_by("name", "ASC; DROP TABLE users")


class TestMutations:
    """INSERT, UPDATE and DELETE rendering."""

    def test_insert(self, builder):
        sql = builder.build_insert({"name": "Ada", "email": "ada@example.com"})

        assert sql == "INSERT INTO users (name, email) VALUES (:name, :email)"
        assert builder.get_params() == {"name": "Ada", "email": "ada@example.com"}

    def test_insert_sanitizes_columns(self, builder):
        sql = builder.build_insert({"na'me": "Ada"})

        assert sql == "INSERT INTO users (name) VALUES (:name)"

    def test_insert_requires_data(self, builder):
        with pytest.raises(InvalidArgumentError):
            builder.build_insert({})

    def test_update_with_where(self, builder):
        builder.where("id", "=", 1)
        sql = builder.build_update({"name": "Ada", "active": True})

        assert sql == "UPDATE users SET name = :name, active = :active WHERE id = :id_0"
        assert builder.get_params() == {"id_0": 1, "name": "Ada", "active": True}

    def test_update_without_where(self, builder):
        assert builder.build_update({"active": False}) == "UPDATE users SET active = :active"

    def test_update_with_dotted_column(self, builder):
        assert builder.build_update({"users.name": "Ada"}) == "UPDATE users SET users.name = :users_name"

    def test_delete_with_where(self, builder):
        builder.where("id", "=", 7)

        assert builder.build_delete() == "DELETE FROM users WHERE id = :id_0"
        assert builder.get_params() == {"id_0": 7}

    def test_delete_without_where(self, builder):
        assert builder.build_delete() == "DELETE FROM users"


class TestStateHandling:
    """Collisions, reset and state isolation."""

    def test_second_insert_without_reset_collides(self, builder):
        builder.build_insert({"name": "Ada"})

        with pytest.raises(PlaceholderCollisionError, match="reset"):
            builder.build_insert({"name": "Grace"})

        assert builder.get_params() == {"name": "Ada"}

    def test_update_column_matching_where_placeholder_collides(self, builder):
        builder.where("id", "=", 1)

        with pytest.raises(PlaceholderCollisionError):
            builder.build_update({"id_0": 2})

        assert builder.get_params() == {"id_0": 1}

    def test_collision_binds_nothing(self, builder):
        builder.build_insert({"name": "Ada"})

        with pytest.raises(PlaceholderCollisionError):
            builder.build_insert({"email": "x@example.com", "name": "Grace"})

        assert builder.get_params() == {"name": "Ada"}

    def test_collision_is_a_value_error(self, builder):
        builder.build_insert({"name": "Ada"})

        with pytest.raises(ValueError):
            builder.build_insert({"name": "Grace"})

    def test_reset_clears_everything_but_table(self, builder):
        builder.select(["id"]).where("id", "=", 1).join("orders", "users.id = orders.user_id")
        builder.order_by("id").group_by("id").limit(1).offset(2)

        builder.reset()

        assert builder.build_select() == "SELECT * FROM users"
        assert builder.get_params() == {}
        assert builder.table == "users"

    def test_insert_after_reset(self, builder):
        builder.build_insert({"name": "Ada"})
        builder.reset()

        assert builder.build_insert({"name": "Grace"}) == "INSERT INTO users (name) VALUES (:name)"
        assert builder.get_params() == {"name": "Grace"}

    def test_get_params_returns_copy(self, builder):
        builder.where("id", "=", 1)
        builder.get_params()["id_0"] = 99

        assert builder.get_params() == {"id_0": 1}

    def test_state_is_a_snapshot(self, builder):
        builder.where("id", "=", 1)
        state = builder.state
        state.predicates.append("1=1")

        assert builder.build_select() == "SELECT * FROM users WHERE id = :id_0"

    def test_clauses_persist_across_builds(self, builder):
        builder.where("id", "=", 1)

        assert builder.build_select() == builder.build_select()
        assert builder.build_delete() == "DELETE FROM users WHERE id = :id_0"


class TestTableAndIdentifiers:

    def test_table_is_sanitized(self):
        builder = QueryBuilder("users; DROP TABLE users")

        assert builder.table == "usersDROPTABLEusers"
        assert builder.build_select() == "SELECT * FROM usersDROPTABLEusers"

    def test_invalid_table_is_rejected(self):
        with pytest.raises(InvalidIdentifierError):
            QueryBuilder("123")

    def test_strict_identifiers(self):
        builder = QueryBuilder("users", strict_identifiers=True)

        with pytest.raises(InvalidIdentifierError):
            builder.where("first name", "=", "Ada")

    def test_satisfies_statement_builder_protocol(self, builder):
        assert isinstance(builder, StatementBuilder)
