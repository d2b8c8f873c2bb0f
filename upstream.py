"""JSON-over-HTTP calls to the hosts the bridge talks to.

One place checks the status, parses the body and raises, so the GitHub and
Render clients don't repeat it at every call site.
"""
import logging
import time

import requests

from errors import DeadlineExceededError, UpstreamError

logger = logging.getLogger(__name__)


class Deadline:
    """Wall-clock budget shared by a sequence of calls. ``None`` means unbounded."""

    def __init__(self, seconds=None, clock=time.monotonic):
        self._clock = clock
        self._expires = None if seconds is None else clock() + seconds

    def remaining(self):
        if self._expires is None:
            return None
        return self._expires - self._clock()

    def timeout_for(self, step, per_call):
        """Timeout to use for the next call, or raise if nothing is left."""
        remaining = self.remaining()
        if remaining is None:
            return per_call
        if remaining <= 0:
            raise DeadlineExceededError(step)
        return min(per_call, remaining)


class Response:
    def __init__(self, status, data):
        self.status = status
        self.data = data

    @property
    def message(self):
        """GitHub and Render both put the reason under ``message``."""
        if isinstance(self.data, dict) and self.data.get("message"):
            return str(self.data["message"])
        if self.data is None:
            return ""
        return str(self.data)


def parse_body(response):
    text = response.text
    if not text:
        return None
    try:
        return response.json()
    except ValueError:
        return text


def call(session, step, method, url, headers, timeout, deadline=None, json=None):
    """Send one request and return a Response, whatever the status.

    Raises DeadlineExceededError when the deadline is spent or the call times
    out, and UpstreamError when no response arrives at all.
    """
    if deadline is not None:
        timeout = deadline.timeout_for(step, timeout)
    logger.debug("%s: %s %s", step, method, url)
    try:
        r = session.request(method, url, headers=headers, json=json, timeout=timeout)
    except requests.Timeout as e:
        raise DeadlineExceededError(step) from e
    except requests.RequestException as e:
        raise UpstreamError(step, None, str(e)) from e
    return Response(r.status_code, parse_body(r))


def call_ok(session, step, method, url, headers, timeout, deadline=None, json=None):
    """Like call() but any non-2xx status becomes UpstreamError."""
    resp = call(session, step, method, url, headers, timeout, deadline, json)
    if not 200 <= resp.status < 300:
        raise_upstream(step, resp)
    return resp


def call_json(session, step, method, url, headers, timeout, deadline=None, json=None):
    return call_ok(session, step, method, url, headers, timeout, deadline, json).data


def pluck(step, resp, *keys):
    """Walk ``keys`` into a successful response body.

    A body of the wrong shape is an upstream failure of ``step``, not a crash.
    """
    value = resp.data
    for key in keys:
        if not isinstance(value, dict) or key not in value:
            logger.warning("%s returned %s with unexpected body", step, resp.status)
            raise UpstreamError(step, resp.status, "unexpected response body")
        value = value[key]
    return value


def raise_upstream(step, resp):
    logger.warning("%s returned %s: %s", step, resp.status, resp.message)
    raise UpstreamError(step, resp.status, resp.message)
