"""
equiprent.errors
================

Rejections raised by the lifecycle engine.

Every class derives from :class:`RentalError`, itself a :class:`ValueError`,
so callers that only care about "the request was invalid" can catch one type.
All of them are local validation failures; nothing here is retried.
"""

from __future__ import annotations

__all__ = [
    "RentalError",
    "InvalidDate",
    "InvalidAdditionalDays",
    "InvalidRentalDays",
    "InvalidQuantity",
    "InvalidUpdate",
    "InvalidEquipment",
    "CannotExtendOpenEnded",
    "NotOpenEnded",
    "AlreadyFinalized",
    "StillOpenEnded",
    "PaymentNotConfirmed",
    "IllegalTransition",
    "IllegalState",
]


class RentalError(ValueError):
    """Base class for every lifecycle rejection."""


# ---------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------
class InvalidDate(RentalError):
    """A date string could not be parsed into a calendar date."""


class InvalidAdditionalDays(RentalError):
    """A fixed extension asked for fewer than one billable day."""


class InvalidRentalDays(RentalError):
    """A fixed-term rental was given a term shorter than one day."""


class InvalidQuantity(RentalError):
    """An equipment line quantity is not a positive integer."""


class InvalidUpdate(RentalError):
    """An update named an unknown field or could not be applied."""


class InvalidEquipment(RentalError):
    """An equipment line is malformed or its equipment id appears twice."""


# ---------------------------------------------------------------------
# Lifecycle preconditions
# ---------------------------------------------------------------------
class CannotExtendOpenEnded(RentalError):
    """Open-ended rentals must be closed before they can be extended."""


class NotOpenEnded(RentalError):
    """Closure only applies to open-ended rentals."""


class AlreadyFinalized(RentalError):
    """The equipment was already marked as returned."""


class StillOpenEnded(RentalError):
    """An open-ended rental must be closed before it is finalized."""


class PaymentNotConfirmed(RentalError):
    """Finalization requires the rental to be paid."""


class IllegalTransition(RentalError):
    """The requested change moves the rental to a state it cannot reach."""


class IllegalState(RentalError):
    """The record's fields do not describe any legal lifecycle state."""
