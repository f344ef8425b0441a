import datetime
import json

import httpx
import pytest

from ....exceptions import TransportError

ROOT_URL = "http://localhost:8080/api/v1"


class Recorder:
    requests: list

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/missing"):
            return httpx.Response(404, json={"message": "not found"})
        if request.url.path.endswith("/empty"):
            return httpx.Response(204)
        if request.url.path.endswith("/text"):
            return httpx.Response(200, text="plain")
        return httpx.Response(200, json={"ok": True})

    def __init__(self):
        self.requests = []


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def client(recorder):
    return httpx.Client(transport=httpx.MockTransport(recorder))


@pytest.fixture
def target(client):
    from ..transport import HttpxTransport

    return HttpxTransport(client)


def test_get(target, recorder):
    result = target.request("GET", f"{ROOT_URL}/things", params=[("page", "0"), ("size", "20")])
    assert result == {"ok": True}
    request = recorder.requests[0]
    assert request.method == "GET"
    assert str(request.url) == f"{ROOT_URL}/things?page=0&size=20"
    assert request.headers["Accept"] == "application/hal+json, application/json"
    assert request.content == b""


def test_repeated_params(target, recorder):
    target.request("GET", f"{ROOT_URL}/things", params=[("sort", "a,ASC"), ("sort", "b,DESC")])
    assert recorder.requests[0].url.params.get_list("sort") == ["a,ASC", "b,DESC"]


def test_json_body(target, recorder):
    target.request(
        "POST",
        f"{ROOT_URL}/things",
        body={
            "name": "x",
            "when": datetime.datetime(2020, 1, 2, 3, 4, 5),
            "day": datetime.date(2020, 1, 2),
        },
    )
    request = recorder.requests[0]
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {
        "name": "x",
        "when": "2020-01-02T03:04:05",
        "day": "2020-01-02",
    }


def test_uri_list_body(target, recorder):
    target.request(
        "PUT",
        f"{ROOT_URL}/things/1/owner",
        headers={"Content-Type": "text/uri-list"},
        body=f"{ROOT_URL}/others/1\n{ROOT_URL}/others/2",
    )
    request = recorder.requests[0]
    assert request.headers["Content-Type"] == "text/uri-list"
    assert request.content == f"{ROOT_URL}/others/1\n{ROOT_URL}/others/2".encode()


def test_extra_headers(client, recorder):
    from ..transport import HttpxTransport

    target = HttpxTransport(client, headers={"Authorization": "Bearer token"})
    target.request("GET", f"{ROOT_URL}/things")
    assert recorder.requests[0].headers["Authorization"] == "Bearer token"
    assert recorder.requests[0].headers["Accept"] == "application/hal+json, application/json"


def test_empty_response(target):
    assert target.request("DELETE", f"{ROOT_URL}/things/empty") is None


def test_text_response(target):
    assert target.request("GET", f"{ROOT_URL}/things/text") == "plain"


def test_status_error(target):
    with pytest.raises(TransportError) as excinfo:
        target.request("GET", f"{ROOT_URL}/things/missing")
    assert excinfo.value.status_code == 404
    assert excinfo.value.payload == {"message": "not found"}
    assert "404" in str(excinfo.value)


def test_network_error():
    from ..transport import HttpxTransport

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    target = HttpxTransport(httpx.Client(transport=httpx.MockTransport(handler)))
    with pytest.raises(TransportError) as excinfo:
        target.request("GET", f"{ROOT_URL}/things")
    assert excinfo.value.status_code is None


def test_close_leaves_foreign_client_open(target, client):
    target.close()
    assert not client.is_closed


def test_close_owned_client():
    from ..transport import HttpxTransport

    with HttpxTransport() as target:
        pass
    assert target.client.is_closed
