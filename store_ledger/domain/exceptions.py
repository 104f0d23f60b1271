"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class StoreAPIError(DomainException):
    """Store backend returned an error or is unavailable"""

    pass


class InvalidTransactionAmountError(DomainException):
    """Transaction amount is non-numeric, non-finite or not positive"""

    pass


class CustomerNotFoundError(DomainException):
    """No customer with the requested id is known"""

    pass


class StatementRenderError(DomainException):
    """Statement could not be rasterized or assembled into a document"""

    def __init__(self, message: str, user_message: str = "Error generating PDF. Please try again."):
        super().__init__(message)
        self.user_message = user_message
