"""Pytest fixtures: an in-memory MongoDB (mongomock) plus a recording
session, since mongomock does not implement sessions or transactions."""

import contextlib

import mongomock
import pytest
from pymongo.errors import OperationFailure


class FakeSession:
    """Records the transaction lifecycle instead of talking to a server."""

    def __init__(self):
        self.events = []
        self.transaction_kwargs = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.events.append("end")
        return False

    @contextlib.contextmanager
    def start_transaction(self, **kwargs):
        self.transaction_kwargs = kwargs
        self.events.append("start")
        try:
            yield self
        except Exception:
            self.events.append("abort")
            raise
        self.events.append("commit")


class FakeClient:
    def __init__(self):
        self.sessions = []
        self.closed = False

    def close(self):
        self.closed = True

    def start_session(self):
        session = FakeSession()
        self.sessions.append(session)
        return session


class SessionCollection:
    """Wraps a mongomock collection, accepting (and recording) ``session``.

    ``fail_on`` names a method that raises ``OperationFailure`` instead of
    running, to simulate a server-side error in that operation.
    """

    def __init__(self, collection, fail_on=None):
        self._collection = collection
        self.fail_on = fail_on
        self.sessions_seen = []

    def __getattr__(self, name):
        if name == self.fail_on:
            def _fail(*args, **kwargs):
                raise OperationFailure(f"simulated failure in {name}")
            return _fail
        return getattr(self._collection, name)

    def insert_one(self, document, session=None):
        self.sessions_seen.append(session)
        if self.fail_on == "insert_one":
            raise OperationFailure("simulated failure in insert_one")
        return self._collection.insert_one(document)

    def delete_many(self, mongo_filter, session=None):
        self.sessions_seen.append(session)
        if self.fail_on == "delete_many":
            raise OperationFailure("simulated failure in delete_many")
        return self._collection.delete_many(mongo_filter)


@pytest.fixture
def mongo_client():
    client = mongomock.MongoClient()
    yield client
    client.close()


@pytest.fixture
def people(mongo_client):
    return mongo_client["test"]["testreactive"]


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def session_people(people):
    return SessionCollection(people)
