import pytest
from pymongo.errors import ServerSelectionTimeoutError

from core.config import MongoSettings
from infrastructure.database import MongoDatabase


class FakeAdmin:
    def __init__(self, fail: bool):
        self.fail = fail
        self.commands = []

    async def command(self, name):
        self.commands.append(name)
        if self.fail:
            raise ServerSelectionTimeoutError("localhost:27017: connection refused")
        return {"ok": 1}


class FakeClient:
    instances = []

    def __init__(self, url, *, fail=False, **kwargs):
        self.url = url
        self.kwargs = kwargs
        self.admin = FakeAdmin(fail)
        self.closed = False
        FakeClient.instances.append(self)

    def __getitem__(self, name):
        return {"records": f"{name}.records"}

    async def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def _reset_clients():
    FakeClient.instances.clear()


async def test_connect_pings_and_selects_collection():
    db = MongoDatabase(MongoSettings(url="mongodb://db:27017", database="mydb"), client_factory=FakeClient)
    await db.connect()

    client = FakeClient.instances[0]
    assert client.url == "mongodb://db:27017"
    assert client.kwargs["serverSelectionTimeoutMS"] == 5000
    assert client.admin.commands == ["ping"]
    assert db.is_connected
    assert db.collection == "mydb.records"

    await db.disconnect()
    assert client.closed
    assert not db.is_connected


async def test_connect_failure_closes_client_and_raises():
    def failing(url, **kwargs):
        return FakeClient(url, fail=True, **kwargs)

    db = MongoDatabase(MongoSettings(), client_factory=failing)
    with pytest.raises(ServerSelectionTimeoutError):
        await db.connect()
    assert FakeClient.instances[0].closed
    assert not db.is_connected


async def test_collection_requires_connection():
    db = MongoDatabase(MongoSettings())
    with pytest.raises(RuntimeError):
        _ = db.collection
    # Disconnecting an unconnected handle is a no-op
    await db.disconnect()


def test_blank_collection_name_rejected():
    with pytest.raises(ValueError):
        MongoSettings(collection="  ")
