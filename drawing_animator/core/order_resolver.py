"""
Order Resolver

Derives the total order in which elements are revealed.

Order value is the element's explicit order hint (0 when absent). Elements
sharing order value 0 are ordered by creation time, then by creation nonce,
then by input position. Elements with a non-zero hint are ordered purely by
that hint and interleave with the rest by hint value. Input position is the
final tie-break everywhere, so the result never depends on sort internals.
"""

import logging
from typing import List, Sequence, Tuple

from ..models.data_models import DrawingElement


logger = logging.getLogger(__name__)


class OrderResolver:
    """
    Usage:
        ordered = OrderResolver().resolve(elements)
    """

    @staticmethod
    def order_value(element: DrawingElement) -> int:
        return element.order_hint or 0

    @staticmethod
    def creation_timestamp(element: DrawingElement) -> int:
        """Creation time, falling back to the creation nonce, then 0"""
        if element.created_at is not None:
            return element.created_at
        if element.version_nonce is not None:
            return element.version_nonce
        return 0

    def sort_key(self, element: DrawingElement, position: int) -> Tuple[int, int, int]:
        order = self.order_value(element)
        timestamp = self.creation_timestamp(element) if order == 0 else 0
        return (order, timestamp, position)

    def resolve(self, elements: Sequence[DrawingElement]) -> List[DrawingElement]:
        """Return a new list in reveal order; the input is left untouched."""
        indexed = list(enumerate(elements))
        indexed.sort(key=lambda item: self.sort_key(item[1], item[0]))
        ordered = [element for _, element in indexed]

        hinted = sum(1 for e in ordered if self.order_value(e) != 0)
        logger.debug(f"Resolved order for {len(ordered)} elements ({hinted} with explicit hints)")
        return ordered
