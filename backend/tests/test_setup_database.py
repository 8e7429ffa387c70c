import pytest

import setup_database
from api.auth import verify_password
from database.connection import Base, SessionLocal, engine
from database.models import Doctor, Hospital, Medicine, Pharmacy, User


@pytest.fixture()
def app_tables():
    yield
    Base.metadata.drop_all(bind=engine)


def _counts():
    session = SessionLocal()
    try:
        return {
            model.__tablename__: session.query(model).count()
            for model in (User, Hospital, Pharmacy, Doctor, Medicine)
        }
    finally:
        session.close()


def test_reset_and_seed_creates_demo_accounts(app_tables):
    assert setup_database.setup_database(reset=True, seed=True)

    assert _counts() == {"users": 1, "hospitals": 1, "pharmacies": 1, "doctors": 2, "medicines": 2}

    session = SessionLocal()
    try:
        hospital = session.query(Hospital).one()
        assert verify_password(setup_database.DEMO_PASSWORD, hospital.password_hash)
    finally:
        session.close()


def test_second_seed_is_skipped(app_tables, capsys):
    setup_database.setup_database(reset=True, seed=True)
    first = _counts()

    setup_database.setup_database(seed=True)

    assert _counts() == first
    assert "already present" in capsys.readouterr().out


def test_reset_drops_previous_rows(app_tables):
    setup_database.setup_database(reset=True, seed=True)
    session = SessionLocal()
    try:
        session.add(User(full_name="Extra Patient", email="extra@x.com", password_hash="x"))
        session.commit()
    finally:
        session.close()

    setup_database.main(["--reset", "--seed"])

    assert _counts()["users"] == 1


def test_without_seed_only_tables_are_created(app_tables):
    setup_database.main(["--reset"])

    assert _counts() == {"users": 0, "hospitals": 0, "pharmacies": 0, "doctors": 0, "medicines": 0}
