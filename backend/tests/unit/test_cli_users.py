"""Tests for the ``flask users`` command group."""

from __future__ import annotations

from auth_service.repositories.user import UserRepository

from tests.factories.user import UserFactory


def test_create_user(app, session):
    runner = app.test_cli_runner()

    result = runner.invoke(
        args=["users", "create", "--email", "New@Example.com", "--password", "s3cret!"]
    )

    assert result.exit_code == 0, result.output
    user = UserRepository().get_active_by_email("new@example.com")
    assert user is not None
    assert user.verify_password("s3cret!")


def test_create_duplicate_user_fails(app, session):
    UserFactory(email="dup@example.com")
    runner = app.test_cli_runner()

    result = runner.invoke(
        args=["users", "create", "--email", "dup@example.com", "--password", "x"]
    )

    assert result.exit_code != 0
    assert "already exists" in result.output


def test_delete_user(app, session):
    UserFactory(email="bye@example.com")
    runner = app.test_cli_runner()

    result = runner.invoke(args=["users", "delete", "--email", "bye@example.com"])

    assert result.exit_code == 0, result.output
    assert UserRepository().get_active_by_email("bye@example.com") is None

    again = runner.invoke(args=["users", "delete", "--email", "bye@example.com"])
    assert again.exit_code != 0
