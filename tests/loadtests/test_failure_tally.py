"""The load test failure tally groups failures by endpoint and reason."""

import requests
from loadtests.helpers.failures import FailureTally


class _Response:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        return self._body


class TestFailureTally:
    def test_successful_requests_are_not_counted(self):
        tally = FailureTally()

        assert tally.record("GET", "/products", _Response(200, {"items": []})) is None
        assert not tally

    def test_repeated_reason_is_reported_once_and_counted(self):
        tally = FailureTally()
        sold_out = _Response(400, {"error": {"items": ["Sofa góc chữ L: chỉ còn 0 sản phẩm"]}})

        first = tally.record("POST", "/orders", sold_out)
        second = tally.record("POST", "/orders", sold_out)

        assert first == ("POST /orders", "400 items: Sofa góc chữ L: chỉ còn 0 sản phẩm")
        assert second is None
        assert tally.most_common() == [(first, 2)]

    def test_connection_errors_are_keyed_by_exception(self):
        tally = FailureTally()

        key = tally.record("GET", "/products", exception=requests.ConnectionError("refused"))

        assert key == ("GET /products", "ConnectionError: refused")

    def test_most_common_orders_by_count(self):
        tally = FailureTally()
        for _ in range(3):
            tally.record("POST", "/orders", _Response(400, {"error": "Out of stock"}))
        tally.record("GET", "/products/missing", _Response(404, {"error": "Product not found"}))

        assert [count for _, count in tally.most_common()] == [3, 1]

        tally.clear()
        assert not tally
