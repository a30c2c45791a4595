from rest_framework import status

from common.exceptions import ClubError


class InvalidAmount(ClubError, ValueError):
    code = "invalid_amount"
    default_message = "Amount must be a positive whole number of points"
    status_code = status.HTTP_400_BAD_REQUEST


class InsufficientFunds(ClubError):
    """The conditional decrement found fewer points than requested."""

    code = "insufficient_points"
    default_message = "Insufficient points"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, balance: int, required: int, message=None):
        self.balance = balance
        self.required = required
        super().__init__(message, balance=balance, required=required)
