"""Tests for mapping IntegrityErrors to the unique key that raised them."""

from sqlalchemy.exc import IntegrityError

from conduit.database import is_unique_violation, violated_constraint


def _integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO user ...", {}, orig)


class _UniqueViolation(Exception):
    """Stand-in for a driver error that exposes the constraint it hit."""

    def __init__(self, message: str, constraint_name: str):
        super().__init__(message)
        self.constraint_name = constraint_name


class TestIsUniqueViolation:
    """is_unique_violation tests."""

    def test_postgres_message_names_constraint(self):
        exc = _integrity_error(
            Exception(
                'duplicate key value violates unique constraint "key_email"\n'
                "DETAIL:  Key (email)=(key_username@example.com) already exists."
            )
        )

        assert is_unique_violation(exc, "key_email", "user.email")
        assert not is_unique_violation(exc, "key_username", "user.username")

    def test_mysql_message_names_constraint(self):
        exc = _integrity_error(
            Exception("(1062, \"Duplicate entry 'key_username@example.com' for key 'user.key_email'\")")
        )

        assert violated_constraint(exc) == "key_email"
        assert not is_unique_violation(exc, "key_username", "user.username")

    def test_structured_constraint_name_wins(self):
        """A driver exception chained as the cause carries the authoritative name."""
        adapted = Exception("<class 'asyncpg.exceptions.UniqueViolationError'>: key_username")
        adapted.__cause__ = _UniqueViolation("duplicate key", "key_email")
        exc = _integrity_error(adapted)

        assert is_unique_violation(exc, "key_email", "user.email")
        assert not is_unique_violation(exc, "key_username", "user.username")

    def test_sqlite_columns(self):
        exc = _integrity_error(Exception("UNIQUE constraint failed: user.email"))

        assert is_unique_violation(exc, "key_email", "user.email")
        assert not is_unique_violation(exc, "key_username", "user.username")

    def test_sqlite_composite_key_not_mistaken_for_slug(self):
        exc = _integrity_error(
            Exception("UNIQUE constraint failed: follow.follower_id, follow.followee_id")
        )

        assert not is_unique_violation(exc, "key_slug", "article.slug")
