import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from santa_sorter.db.models import Base


@pytest.fixture
def session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
