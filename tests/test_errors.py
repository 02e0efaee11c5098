import httplib2
from googleapiclient.errors import HttpError

from workspace_admin.batch import BatchResult
from workspace_admin.errors import (
    BatchError,
    is_bad_request,
    is_duplicate,
    is_not_found,
    is_retryable,
)


def test_rate_limit_and_server_errors_are_retryable(http_error):
    assert is_retryable(http_error(429, "Rate Limit Exceeded"))
    assert is_retryable(http_error(500, "Backend Error"))
    assert is_retryable(http_error(503, "Service Unavailable"))


def test_quota_forbidden_is_retryable(http_error):
    assert is_retryable(http_error(403, "Quota exceeded for quota metric"))
    assert is_retryable(http_error(403, "Limit reached", reason="userRateLimitExceeded"))


def test_plain_forbidden_is_not_retryable(http_error):
    assert not is_retryable(http_error(403, "Not Authorized to access this resource/api"))
    assert not is_retryable(http_error(404, "Resource Not Found: groupKey"))


def test_duplicate_detection(http_error):
    assert is_duplicate(http_error(409, "Member already exists."))
    assert is_duplicate(http_error(400, "duplicate", reason="duplicate"))
    assert not is_duplicate(http_error(404, "Resource Not Found: memberKey"))


def test_status_helpers(http_error):
    assert is_not_found(http_error(404))
    assert is_bad_request(http_error(400, "Invalid productId"))
    assert not is_bad_request(http_error(404))


def test_batch_error_message_counts_failures():
    result = BatchResult(label="insert_members:team@example.com")
    result.succeeded.append("a@example.com")
    result.failed.append(("b@example.com", RuntimeError("boom")))
    err = BatchError(result)
    assert err.result is result
    assert str(err) == "insert_members:team@example.com: 1 of 2 items failed"


MEMBERS_URI = (
    "https://admin.googleapis.com/admin/directory/v1/groups/"
    "no-duplicates%40example.com/members?alt=json"
)


def test_request_uri_does_not_affect_classification(http_error):
    forbidden = http_error(403, "Not Authorized to access this resource/api", uri=MEMBERS_URI)
    assert "duplicates" in str(forbidden)
    assert not is_duplicate(forbidden)
    assert not is_retryable(forbidden)

    quota_uri = "https://admin.googleapis.com/admin/directory/v1/groups/quota-team%40example.com"
    assert not is_retryable(http_error(403, "Not Authorized", uri=quota_uri))


def test_non_json_body_is_matched_as_text():
    err = HttpError(httplib2.Response({"status": 403}), b"Quota exceeded", uri=MEMBERS_URI)
    assert is_retryable(err)
    assert not is_duplicate(err)
