import pytest
from unittest.mock import MagicMock
from tabs import TabStore
from app_state import AppState
from edit_buffers import EditBuffers
from req_struct import HttpRequest


@pytest.fixture
def buffers():
    return EditBuffers()


@pytest.fixture
def store(buffers):
    return TabStore(buffers)


@pytest.fixture
def state():
    return AppState.create()


@pytest.fixture
def valid_request():
    return HttpRequest(
        url="https://api.example.com/users",
        method="POST",
        headers=[("Content-Type", "application/json")],
        params=[("page", "1")],
        body='{"name": "Ada"}',
    )


@pytest.fixture
def json_response():
    response = MagicMock()
    response.status_code = 200
    response.headers = {
        "Content-Type": "application/json",
        "Content-Length": "7",
    }
    response.text = '{"a":1}'
    return response
