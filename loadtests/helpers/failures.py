"""Failure tally for load test runs.

Groups failed requests by endpoint and reason so the end-of-run summary
shows which calls broke and why, instead of one log line per failure.
"""

from __future__ import annotations

from collections import Counter

from loadtests.helpers.response import extract_error_detail


class FailureTally:
    def __init__(self):
        self.counts: Counter = Counter()

    def record(self, request_type, name, response=None, exception=None):
        """Count a failed request. Returns its (endpoint, reason) key the first
        time that pair is seen, ``None`` otherwise or when the request succeeded."""
        endpoint = f"{request_type} {name}"
        if exception:
            key = (endpoint, f"{type(exception).__name__}: {exception}")
        elif response is not None and response.status_code >= 400:
            key = (endpoint, f"{response.status_code} {extract_error_detail(response)}")
        else:
            return None

        first = key not in self.counts
        self.counts[key] += 1
        return key if first else None

    def most_common(self, n=10):
        return self.counts.most_common(n)

    def clear(self):
        self.counts.clear()

    def __bool__(self):
        return bool(self.counts)
