"""Pytest fixtures: an in-memory stand-in for a googleapiclient Resource."""

import json
import threading

import httplib2
import pytest
from googleapiclient.errors import HttpError

from workspace_admin.config import WorkspaceAdminConfig


def make_http_error(status, message="error", reason=None, uri=None):
    body = {"error": {"code": status, "message": message}}
    if reason:
        body["error"]["errors"] = [{"reason": reason, "message": message}]
    return HttpError(
        httplib2.Response({"status": status}), json.dumps(body).encode(), uri=uri
    )


class FakeRequest:
    def __init__(self, collection, method, kwargs):
        self.collection = collection
        self.method = method
        self.kwargs = kwargs

    def execute(self, http=None):
        return self.collection.dispatch(self.method, self.kwargs, http)


class FakeCollection:
    """Records every call; ``handlers[method](**kwargs)`` produces the response."""

    def __init__(self):
        self.handlers = {}
        self.calls = []
        self.transports = []
        self._lock = threading.Lock()

    def dispatch(self, method, kwargs, http=None):
        with self._lock:
            self.calls.append((method, dict(kwargs)))
            self.transports.append((threading.get_ident(), http))
        handler = self.handlers[method]
        return handler(**kwargs)

    def calls_to(self, method):
        return [kwargs for name, kwargs in self.calls if name == method]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        if name.endswith("_next"):
            return self._next
        return lambda **kwargs: FakeRequest(self, name, kwargs)

    def _next(self, request, response):
        token = response.get("nextPageToken")
        if not token:
            return None
        return FakeRequest(self, request.method, {**request.kwargs, "pageToken": token})


class FakeService:
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return self.collections.setdefault(name, FakeCollection())

    def users(self):
        return self.collection("users")

    def groups(self):
        return self.collection("groups")

    def members(self):
        return self.collection("members")

    def licenseAssignments(self):
        return self.collection("licenseAssignments")


def paged(key, pages):
    """Handler serving ``pages`` in order, chained by page tokens."""

    def handler(**kwargs):
        index = int(kwargs.get("pageToken") or 0)
        response = {key: pages[index]}
        if index + 1 < len(pages):
            response["nextPageToken"] = str(index + 1)
        return response

    return handler


@pytest.fixture
def config():
    return WorkspaceAdminConfig(
        admin_email="admin@example.com",
        customer_id="C0123abc",
        max_workers=4,
        max_retries=3,
        backoff_base_seconds=0.5,
        backoff_max_seconds=2.0,
    )


@pytest.fixture
def service():
    return FakeService()


@pytest.fixture
def sleeps(monkeypatch):
    """Capture backoff sleeps instead of waiting."""
    recorded = []
    monkeypatch.setattr(
        "workspace_admin.apis.base.time.sleep", lambda s: recorded.append(s)
    )
    return recorded


@pytest.fixture
def http_error():
    return make_http_error


@pytest.fixture
def paged_handler():
    return paged
