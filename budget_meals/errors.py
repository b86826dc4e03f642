"""Exception types raised by the storage core.

"Not found" is deliberately absent: lookups return None instead of raising.
"""


class BudgetMealsError(Exception):
    """Base class for all storage-core errors."""


class StorageUnavailable(BudgetMealsError):
    """The database cannot be opened, initialized, or has already been closed."""


class ConstraintViolation(BudgetMealsError):
    """A write (or a stored row) breaks the data model's encoding rules."""
