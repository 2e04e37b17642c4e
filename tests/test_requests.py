import asyncio
import time

import httpx
import pytest

from gdetect import Client, errors
from gdetect.models import SubmitOptions

from fake_server import ENDPOINT, Reply, TOKEN


async def test_submit_returns_uuid(client, fake, sample):
    uuid = await client.submit_file(sample, SubmitOptions(description="valid test"))
    assert uuid == "uuid-false_mirai"
    assert fake.submissions[0]["filename"] == "false_mirai"
    assert fake.submissions[0]["content"] == b"test content"


async def test_submit_sends_form_fields(client, fake, sample):
    options = SubmitOptions(description="file params", tags=["tag1", "tag2"], bypass_cache=True)
    await client.submit_file(str(sample), options)
    sent = fake.submissions[0]
    assert sent["description"] == "file params"
    assert sent["tags"] == "tag1,tag2"
    assert sent["bypass-cache"] == "true"


async def test_submit_filename_override(client, fake, sample):
    uuid = await client.submit_file(sample, SubmitOptions(filename="test.exe"))
    assert uuid == "uuid-test.exe"
    assert fake.submissions[0]["filename"] == "test.exe"


async def test_submit_missing_file_fails_before_any_request(client, fake, tmp_path):
    with pytest.raises(errors.FileError):
        await client.submit_file(tmp_path / "not" / "a" / "file")
    assert fake.submissions == []
    assert sum(fake.hits.values()) == 0


async def test_submit_status_false_is_submission_error(client, sample):
    with pytest.raises(errors.SubmissionError) as excinfo:
        await client.submit_file(sample, SubmitOptions(description="submission status false"))
    assert '"status":false' in excinfo.value.body.replace(" ", "")


async def test_submit_bad_json_is_decode_error(client, sample):
    with pytest.raises(errors.DecodeError):
        await client.submit_file(sample, SubmitOptions(description="bad json"))


async def test_submit_bad_request_reports_status_and_body(client, sample):
    with pytest.raises(errors.RequestError) as excinfo:
        await client.submit_file(sample, SubmitOptions(description="invalid file"))
    exc = excinfo.value
    assert type(exc) is errors.RequestError
    assert exc.status_code == 400
    assert str(exc).startswith("invalid response from endpoint, 400 Bad Request: ")
    assert '"uuid":"1234"' in exc.body


async def test_submit_deadline(client, sample):
    with pytest.raises(errors.TimeoutError):
        await client.submit_file(sample, SubmitOptions(description="timeout"), timeout=0.05)


async def test_bad_token_is_auth_error(fake):
    client = fake.make_client(token="00000000-00000000-00000000-00000000-00000000")
    assert client.token != TOKEN
    with pytest.raises(errors.AuthError) as excinfo:
        await client.get_result_by_uuid("1234_valid_test")
    assert excinfo.value.status_code == 401
    await client.http_client.aclose()


async def test_get_result_by_uuid(client):
    result = await client.get_result_by_uuid("1234_valid_test")
    assert result.uuid == "1234_valid_test"
    assert result.done is True


async def test_get_result_by_sha256(client, fake):
    result = await client.get_result_by_sha256("1234_valid_test")
    assert result.uuid == "1234_valid_test"
    assert fake.hits["search/1234_valid_test"] == 1


@pytest.mark.parametrize("method", ["get_result_by_uuid", "get_result_by_sha256", "get_full_submission_by_uuid"])
@pytest.mark.parametrize(
    "key, error",
    [
        ("1234_not_found", errors.NotFoundError),
        ("1234_server_error", errors.ServerError),
        ("1234_bad_json", errors.DecodeError),
    ],
)
async def test_status_mapping(client, method, key, error):
    with pytest.raises(error):
        await getattr(client, method)(key)


async def test_forbidden_is_auth_error(client):
    with pytest.raises(errors.AuthError) as excinfo:
        await client.get_result_by_sha256("1234_forbidden")
    assert excinfo.value.status_code == 403


async def test_status_mapping_ignores_body(client, fake):
    fake.script("results/odd", Reply(502, "<html>bad gateway</html>"))
    with pytest.raises(errors.ServerError) as excinfo:
        await client.get_result_by_uuid("odd")
    assert "bad gateway" in excinfo.value.body


async def test_result_with_wrong_shape_is_decode_error(client, fake):
    fake.script("results/list", Reply(200, [1, 2, 3]))
    with pytest.raises(errors.DecodeError):
        await client.get_result_by_uuid("list")


async def test_full_submission_is_left_unstructured(client):
    report = await client.get_full_submission_by_uuid("1234_valid_test")
    assert report["files"] == [{"sha256": "aa"}]


@pytest.mark.parametrize("method", ["get_result_by_uuid", "get_result_by_sha256", "get_full_submission_by_uuid"])
async def test_request_deadline(client, method):
    started = time.monotonic()
    with pytest.raises(errors.TimeoutError):
        await getattr(client, method)("1234_timeout", timeout=0.05)
    assert time.monotonic() - started < 2


async def test_cancellation_aborts_in_flight_request(client):
    task = asyncio.create_task(client.get_result_by_uuid("1234_timeout"))
    await asyncio.sleep(0.05)
    started = time.monotonic()
    task.cancel()
    with pytest.raises(errors.CancelledError):
        await task
    assert time.monotonic() - started < 1


async def test_transport_failure_is_transport_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    client = Client(ENDPOINT, TOKEN, http_client=http)
    with pytest.raises(errors.TransportError):
        await client.get_result_by_uuid("1234")
    await http.aclose()


async def test_submit_accepted_without_uuid_is_decode_error(client, fake, sample):
    fake.submit_replies["no uuid"] = Reply(200, {"status": True})
    with pytest.raises(errors.DecodeError) as excinfo:
        await client.submit_file(sample, SubmitOptions(description="no uuid"))
    assert '"status":true' in excinfo.value.body


def test_single_tag_string_is_not_split():
    assert SubmitOptions(tags="abc").form_fields()["tags"] == "abc"
    assert SubmitOptions(tags=["a", "b"]).tags == ("a", "b")


async def test_identifiers_are_escaped_in_path(client, fake):
    fake.script("results/a?x=1", Reply(200, {"uuid": "a?x=1", "done": True}))
    fake.script("search/a/b", Reply(200, {"uuid": "slash", "done": True}))
    result = await client.get_result_by_uuid("a?x=1")
    assert result.uuid == "a?x=1"
    assert (await client.get_result_by_sha256("a/b")).uuid == "slash"
    assert fake.hits["results/a?x=1"] == 1


@pytest.mark.parametrize("done", ["yes", 1, "true"])
async def test_done_flag_must_be_a_json_boolean(client, fake, done):
    fake.script("results/loose", Reply(200, {"uuid": "loose", "done": done}))
    with pytest.raises(errors.DecodeError):
        await client.get_result_by_uuid("loose")


async def test_transport_read_timeout_is_timeout_error():
    def slow(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(slow))
    client = Client(ENDPOINT, TOKEN, http_client=http)
    with pytest.raises(errors.TimeoutError) as excinfo:
        await client.get_result_by_sha256("abc")
    assert isinstance(excinfo.value.__cause__, httpx.ReadTimeout)
    await http.aclose()
