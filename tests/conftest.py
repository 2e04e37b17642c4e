from __future__ import annotations

import pytest

from fake_server import FakeDetect


@pytest.fixture()
def fake() -> FakeDetect:
    return FakeDetect()


@pytest.fixture()
async def client(fake: FakeDetect):
    client = fake.make_client()
    yield client
    await client.http_client.aclose()


@pytest.fixture()
def sample(tmp_path):
    path = tmp_path / "false_mirai"
    path.write_bytes(b"test content")
    return path


@pytest.fixture()
def other_sample(tmp_path):
    path = tmp_path / "false_cryptolocker"
    path.write_bytes(b"other content")
    return path
