"""Errors raised by lookup and diary services."""


class LookupFailedError(Exception):
    """Base class for nutrition lookup failures."""


class ProductNotFoundError(LookupFailedError):
    """The database has no product for the given code."""


class NoResultsError(LookupFailedError):
    """No database returned any result for a search."""


class InvalidProductCodeError(LookupFailedError):
    """A product code could not be routed to a database."""


class FoodNotFoundError(Exception):
    """A diary food item or log does not exist."""


class InvalidPortionError(ValueError):
    """A logged quantity is incomplete or given more than one way."""
