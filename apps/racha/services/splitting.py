"""
Cent-precise equal splitting.

Amounts are converted to integer cents, divided, and the remainder is
handed out one cent at a time, so shares always sum exactly to the total.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Sequence, Tuple, TypeVar

from .exceptions import InvalidAmountError

T = TypeVar('T')

CENT = Decimal('0.01')


def to_cents(amount: Decimal) -> int:
    """
    Convert a currency amount to integer cents.

    Raises:
        InvalidAmountError: If the amount has more than two decimal places
    """
    amount = Decimal(amount)
    quantized = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if quantized != amount:
        raise InvalidAmountError(f"Amount {amount} has more precision than one cent")
    return int(quantized * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / Decimal(100)).quantize(CENT)


def split_equally(total: Decimal, shareholders: Sequence[T]) -> List[Tuple[T, Decimal]]:
    """
    Split a total among shareholders with cent precision.

    Algorithm:
        1. Convert to cents: ``total_cents``
        2. Base share: ``base = total_cents // N``
        3. Remainder: ``remainder = total_cents - base * N``
        4. The first ``remainder`` shareholders get ``base + 1`` cents
        5. The rest get ``base`` cents

    The order of ``shareholders`` decides who receives the extra cents;
    callers pass them in participant creation order.

    Args:
        total: Amount to split (at most two decimal places)
        shareholders: Objects to split among, in remainder order

    Returns:
        List of (shareholder, amount) tuples in input order

    Raises:
        ValueError: If shareholders is empty
        InvalidAmountError: If total has sub-cent precision

    Example:
        >>> split_equally(Decimal('100.00'), ['a', 'b', 'c'])
        [('a', Decimal('33.34')), ('b', Decimal('33.33')), ('c', Decimal('33.33'))]
    """
    if not shareholders:
        raise ValueError("At least one shareholder required")

    total_cents = to_cents(total)
    count = len(shareholders)

    base_cents = total_cents // count
    remainder_cents = total_cents - base_cents * count

    shares = []
    for i, shareholder in enumerate(shareholders):
        cents = base_cents + 1 if i < remainder_cents else base_cents
        shares.append((shareholder, from_cents(cents)))

    # Safety check
    total_check = sum((amount for _, amount in shares), Decimal('0.00'))
    if total_check != Decimal(total):
        raise ValueError(f"Split calculation error: {total_check} != {total}")

    return shares
