"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence, Tuple

from ..exceptions import InvalidOrderStatusError


# Scale of every stored money column
MONEY_QUANTUM = Decimal("0.01")

# Width of the stored status column
STATUS_MAX_LENGTH = 30


def to_money(value) -> Decimal:
    """Decimal rounded half-up to whole cents."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ProductRecord:
    """
    Authoritative product data owned by the product service.

    The price is rounded to cents on construction, so orders are priced
    with exactly the value the store keeps.

    CRITICAL: Always use Decimal, never float!
    """
    id: int
    name: str
    price: Decimal

    def __post_init__(self):
        object.__setattr__(self, "price", to_money(self.price))


@dataclass(frozen=True)
class OrderStatuses:
    """
    The configured set of order statuses.

    ``initial`` is given to every new order, ``cancelled`` is the terminal
    status used for soft deletes.
    """
    members: Tuple[str, ...]
    initial: str
    cancelled: str

    def __post_init__(self):
        if not self.members:
            raise ValueError("Order status set cannot be empty")
        object.__setattr__(self, "members", tuple(self.members))
        too_long = [name for name in self.members if len(name) > STATUS_MAX_LENGTH]
        if too_long:
            raise ValueError(
                f"Status names longer than {STATUS_MAX_LENGTH} characters: {too_long}"
            )
        for name in (self.initial, self.cancelled):
            if name not in self.members:
                raise ValueError(
                    f"Status {name!r} is not part of the status set {list(self.members)}"
                )

    @classmethod
    def from_names(cls, names: Sequence[str], initial: str, cancelled: str) -> "OrderStatuses":
        return cls(members=tuple(names), initial=initial, cancelled=cancelled)

    def __contains__(self, status: object) -> bool:
        return status in self.members

    def require(self, status: str) -> str:
        """Return ``status`` if it is a member, raise otherwise."""
        if status not in self:
            raise InvalidOrderStatusError(status, self.members)
        return status
