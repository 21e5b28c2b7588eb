import pytest
from sqlalchemy.exc import SQLAlchemyError

from school_api.database import get_session


def test_session_rolls_back_on_persistence_failure():
    gen = get_session()
    session = next(gen)
    calls = []
    session.rollback = lambda: calls.append('rollback')
    with pytest.raises(SQLAlchemyError):
        gen.throw(SQLAlchemyError('disk I/O error'))
    assert calls == ['rollback']


def test_session_closes_cleanly_without_failure():
    gen = get_session()
    session = next(gen)
    assert session.is_active
    with pytest.raises(StopIteration):
        next(gen)
