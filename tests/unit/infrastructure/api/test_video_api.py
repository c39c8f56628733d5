import pytest
from unittest.mock import AsyncMock, MagicMock

from capsweep.domain.errors import ApiStatusError, AuthenticationError
from capsweep.domain.models.http import HttpResponse
from capsweep.infrastructure.api.video_api import ApiVideoClient, parse_captions, parse_video_page
from capsweep.infrastructure.resilience.api_retry import RetryingExecutor

BASE = "https://ws.test"


@pytest.fixture
def executor():
    mock = MagicMock(spec=RetryingExecutor)
    mock.execute = AsyncMock()
    return mock


@pytest.fixture
def client(executor):
    api = ApiVideoClient(executor, base_url=BASE + "/")
    api.access_token = "tok"
    return api


def sent_request(executor):
    return executor.execute.await_args.args[0]


def test_parse_video_page():
    envelope = parse_video_page({
        "data": [{"videoId": "v1", "title": "First"}, {"videoId": "v2", "title": None}],
        "pagination": {"currentPage": 1, "pagesTotal": 4},
    }, requested_page=1)

    assert [p.item_id for p in envelope.items] == ["v1", "v2"]
    assert envelope.items[1].label == ""
    assert envelope.total_pages == 4


def test_parse_video_page_defaults():
    envelope = parse_video_page({}, requested_page=3)
    assert envelope.items == []
    assert envelope.current_page == 3
    assert envelope.total_pages == 1


def test_parse_captions_accepts_srclang_or_language():
    children = parse_captions("v1", {"data": [{"srclang": "en"}, {"language": "fr"}, {"default": True}]})
    assert [c.language for c in children] == ["en", "fr"]


@pytest.mark.asyncio
async def test_authenticate_stores_token(executor, make_response):
    api = ApiVideoClient(executor, base_url=BASE)
    executor.execute.return_value = make_response(200, {"access_token": "abc", "token_type": "Bearer"})

    token = await api.authenticate("key-1")

    assert token == "abc"
    assert api.access_token == "abc"
    request = sent_request(executor)
    assert request.method == "POST"
    assert request.url == f"{BASE}/auth/api-key"
    assert request.json_body == {"apiKey": "key-1"}


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    HttpResponse(status_code=401, content=b'{"title": "Unauthorized"}'),
    HttpResponse(status_code=200, content=b"{}"),
])
async def test_authenticate_rejected(executor, response):
    executor.execute.return_value = response

    with pytest.raises(AuthenticationError):
        await ApiVideoClient(executor, base_url=BASE).authenticate("bad")


@pytest.mark.asyncio
async def test_fetch_video_page(client, executor, make_response):
    executor.execute.return_value = make_response(200, {
        "data": [{"videoId": "v1", "title": "A"}],
        "pagination": {"currentPage": 2, "pagesTotal": 3},
    })

    envelope = await client.fetch_video_page(2, 25)

    request = sent_request(executor)
    assert request.url == f"{BASE}/videos?currentPage=2&pageSize=25"
    assert request.headers["Authorization"] == "Bearer tok"
    assert envelope.current_page == 2
    assert envelope.total_pages == 3


@pytest.mark.asyncio
async def test_fetch_video_page_error_status(client, executor, make_response):
    executor.execute.return_value = make_response(500)

    with pytest.raises(ApiStatusError) as exc_info:
        await client.fetch_video_page(1, 25)
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_fetch_video_page_malformed_json(client, executor):
    executor.execute.return_value = HttpResponse(status_code=200, content=b"<html>")

    with pytest.raises(ApiStatusError):
        await client.fetch_video_page(1, 25)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    ["v1", "v2"],
    {"data": [{"title": "no id"}]},
    {"data": "v1"},
    {"data": [], "pagination": {"pagesTotal": None}},
    {"data": [], "pagination": {"pagesTotal": "many"}},
])
async def test_fetch_video_page_unexpected_shape(client, executor, make_response, body):
    executor.execute.return_value = make_response(200, body)

    with pytest.raises(ApiStatusError) as exc_info:
        await client.fetch_video_page(1, 25)
    assert exc_info.value.status_code == 200
    assert "Unexpected payload" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"data": ["en"]},
    {"data": {"srclang": "en"}},
    [{"srclang": "en"}],
    "en",
])
async def test_list_captions_unexpected_shape(client, executor, make_response, body):
    executor.execute.return_value = make_response(200, body)

    with pytest.raises(ApiStatusError):
        await client.list_captions("v1")


@pytest.mark.asyncio
async def test_authenticate_unexpected_shape(executor, make_response):
    executor.execute.return_value = make_response(200, ["tok"])

    with pytest.raises(ApiStatusError):
        await ApiVideoClient(executor, base_url=BASE).authenticate("secret")


@pytest.mark.asyncio
async def test_list_captions_404_means_none(client, executor, make_response):
    executor.execute.return_value = make_response(404)

    assert await client.list_captions("v1") == []


@pytest.mark.asyncio
async def test_list_captions(client, executor, make_response):
    executor.execute.return_value = make_response(200, {"data": [{"srclang": "en"}, {"srclang": "pt-BR"}]})

    children = await client.list_captions("v1")

    assert sent_request(executor).url == f"{BASE}/videos/v1/captions"
    assert [(c.parent_id, c.language) for c in children] == [("v1", "en"), ("v1", "pt-BR")]


@pytest.mark.asyncio
async def test_list_captions_token_rejected(client, executor, make_response):
    executor.execute.return_value = make_response(403)

    with pytest.raises(AuthenticationError):
        await client.list_captions("v1")


@pytest.mark.asyncio
async def test_delete_caption(client, executor, make_response):
    executor.execute.return_value = make_response(204)

    assert await client.delete_caption("v1", "en") is True
    request = sent_request(executor)
    assert request.method == "DELETE"
    assert request.url == f"{BASE}/videos/v1/captions/en"


@pytest.mark.asyncio
async def test_delete_caption_failure_returns_false(client, executor, make_response):
    executor.execute.return_value = make_response(404)
    assert await client.delete_caption("v1", "en") is False


@pytest.mark.asyncio
async def test_delete_caption_token_rejected(client, executor, make_response):
    executor.execute.return_value = make_response(401)

    with pytest.raises(AuthenticationError):
        await client.delete_caption("v1", "en")


@pytest.mark.asyncio
async def test_path_segments_are_escaped(client, executor, make_response):
    executor.execute.return_value = make_response(204)

    await client.delete_caption("v/1", "en US")

    assert sent_request(executor).url == f"{BASE}/videos/v%2F1/captions/en%20US"
