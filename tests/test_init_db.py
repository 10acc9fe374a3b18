import pytest

from shortlinks import init_db
from shortlinks.core.security import authenticate_user
from shortlinks.models import User


def test_create_initial_user_is_idempotent(db):
    first = init_db.create_initial_user("admin@example.com", "changeme1")
    second = init_db.create_initial_user("admin@example.com", "changeme1")

    assert first is not None
    assert second is None
    assert db.query(User).count() == 1


def test_main_creates_user_that_can_log_in(db):
    init_db.main(["--email", "admin@example.com", "--password", "changeme1"])

    assert authenticate_user(db, "admin@example.com", "changeme1") is not None


def test_main_requires_email_and_password_together():
    with pytest.raises(SystemExit):
        init_db.main(["--email", "admin@example.com"])
