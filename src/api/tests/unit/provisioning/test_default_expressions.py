"""Unit tests for DEFAULT expression validation."""

import pytest

from provisioning.domain.default_expressions import (
    MAX_DEFAULT_LENGTH,
    normalize_default_expression,
)


class TestAcceptedExpressions:
    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            ("0", "0"),
            ("-1.5", "-1.5"),
            ("1e3", "1e3"),
            ("'active'", "'active'"),
            ("'O''Brien'", "'O''Brien'"),
            ("''", "''"),
            ("true", "TRUE"),
            ("FALSE", "FALSE"),
            ("null", "NULL"),
            ("now()", "now()"),
            ("NOW( )", "now()"),
            ("CURRENT_TIMESTAMP", "current_timestamp"),
            ("gen_random_uuid()", "gen_random_uuid()"),
            ("  42  ", "42"),
        ],
    )
    def test_accepts(self, expression, expected):
        assert normalize_default_expression(expression) == expected

    def test_accepts_cast_to_known_type(self):
        assert normalize_default_expression("'{}'::jsonb") == "'{}'::jsonb"
        assert (
            normalize_default_expression("0::NUMERIC(10,2)") == "0::numeric(10,2)"
        )

    def test_string_literal_may_contain_cast_marker(self):
        assert normalize_default_expression("'a::b'") == "'a::b'"


class TestRejectedExpressions:
    @pytest.mark.parametrize(
        "expression",
        [
            "",
            "   ",
            "1; DROP TABLE users",
            "'x'); DROP TABLE users; --",
            "(SELECT max(id) FROM users)",
            "nextval('seq')",
            "pg_sleep(10)",
            "'unterminated",
            "'back\\slash'",
            "'x'::geometry",
            "'x'::text; DROP TABLE t",
            "now()::",
        ],
    )
    def test_rejects(self, expression):
        assert normalize_default_expression(expression) is None

    def test_none_is_absent(self):
        assert normalize_default_expression(None) is None

    def test_rejects_overlong_expression(self):
        assert normalize_default_expression("'" + "a" * MAX_DEFAULT_LENGTH + "'") is None
