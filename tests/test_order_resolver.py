"""
Unit tests for OrderResolver
"""

from drawing_animator.core.order_resolver import OrderResolver
from drawing_animator.models.data_models import DrawingElement


def ids(elements):
    return [e.id for e in elements]


class TestOrderResolver:
    """Tests for the reveal order"""

    def test_creation_time_order(self):
        """Hint-less elements follow creation time"""
        elements = [
            DrawingElement(id="late", created_at=300),
            DrawingElement(id="early", created_at=100),
            DrawingElement(id="middle", created_at=200),
        ]
        assert ids(OrderResolver().resolve(elements)) == ["early", "middle", "late"]

    def test_nonce_fallback(self):
        """Without creation time the creation nonce is used"""
        elements = [
            DrawingElement(id="b", version_nonce=20),
            DrawingElement(id="a", version_nonce=10),
        ]
        assert ids(OrderResolver().resolve(elements)) == ["a", "b"]

    def test_created_at_preferred_over_nonce(self):
        elements = [
            DrawingElement(id="x", created_at=5, version_nonce=1),
            DrawingElement(id="y", created_at=1, version_nonce=999),
        ]
        assert ids(OrderResolver().resolve(elements)) == ["y", "x"]

    def test_input_position_breaks_ties(self):
        elements = [DrawingElement(id=str(i)) for i in range(5)]
        assert ids(OrderResolver().resolve(elements)) == ["0", "1", "2", "3", "4"]

    def test_hints_order_purely_by_hint(self):
        """Hinted elements ignore timestamps and sort after hint 0"""
        elements = [
            DrawingElement(id="h2", order_hint=2, created_at=1),
            DrawingElement(id="h1", order_hint=1, created_at=999),
            DrawingElement(id="plain", created_at=500),
        ]
        assert ids(OrderResolver().resolve(elements)) == ["plain", "h1", "h2"]

    def test_negative_hint_comes_first(self):
        elements = [
            DrawingElement(id="plain", created_at=1),
            DrawingElement(id="first", order_hint=-1),
        ]
        assert ids(OrderResolver().resolve(elements)) == ["first", "plain"]

    def test_equal_hints_keep_input_order(self):
        elements = [
            DrawingElement(id="b", order_hint=3, created_at=2),
            DrawingElement(id="a", order_hint=3, created_at=1),
        ]
        assert ids(OrderResolver().resolve(elements)) == ["b", "a"]

    def test_input_not_mutated(self):
        elements = [DrawingElement(id="b", created_at=2), DrawingElement(id="a", created_at=1)]
        result = OrderResolver().resolve(elements)
        assert ids(elements) == ["b", "a"]
        assert result is not elements

    def test_empty(self):
        assert OrderResolver().resolve([]) == []

    def test_deterministic(self):
        elements = [DrawingElement(id=str(i), created_at=i % 3) for i in range(10)]
        resolver = OrderResolver()
        assert ids(resolver.resolve(elements)) == ids(resolver.resolve(list(elements)))
