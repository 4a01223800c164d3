# backend/repositories/errors.py


class ProductRepositoryError(Exception):
    """Base class for failures raised by the product repository."""


class DataAccessError(ProductRepositoryError):
    """The store could not be reached or rejected the statement."""


class InvalidProductError(ProductRepositoryError):
    """The product cannot be written as given (e.g. update without an ID)."""


class MissingProductIdError(ProductRepositoryError):
    """The store accepted an insert but returned no product ID."""
