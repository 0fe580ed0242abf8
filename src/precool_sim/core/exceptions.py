"""Exception types raised by the cooling model.

- DomainError: a physically impossible or invalid numeric input.
- NumericalInstabilityError: a step would produce non-finite state.
"""

from __future__ import annotations


class DomainError(ValueError):
    """Invalid numeric input to a physical correlation or model.

    Attributes:
        quantity: Name of the offending quantity (e.g. "temperature").
        value: The rejected value, when available.
    """

    def __init__(
        self, message: str, *, quantity: str | None = None, value: float | None = None
    ) -> None:
        super().__init__(message)
        self.quantity = quantity
        self.value = value


class NumericalInstabilityError(ArithmeticError):
    """A state update produced a non-finite value.

    Attributes:
        quantity: State field that became non-finite (e.g. "product_temp").
        index: Zone, or (zone, layer), where it happened.
    """

    def __init__(
        self,
        message: str,
        *,
        quantity: str | None = None,
        index: int | tuple[int, int] | None = None,
    ) -> None:
        super().__init__(message)
        self.quantity = quantity
        self.index = index
