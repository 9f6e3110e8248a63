"""
Exception types shared by the catalog services.

Validation and referential problems are normally reported as unsuccessful
results; these exceptions cover caller errors and database failures.
"""

class CatalogError(Exception):
    """Base class for catalog service errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmptySelectionError(CatalogError):
    """A required id list was missing or empty"""

    def __init__(self, field: str):
        super().__init__(f"{field} is required and must not be empty")
        self.field = field


class NotFoundError(CatalogError):
    """A single requested entity does not exist"""


class ConflictError(CatalogError):
    """A uniqueness rule (name, code) would be violated"""


class CatalogDatabaseError(CatalogError):
    """Database failure after the transaction was rolled back"""


class PublicationFailed(CatalogDatabaseError):
    """Publication transaction failed and was rolled back"""


class AuthenticationRequired(CatalogError):
    """No requestor identity was supplied by the auth middleware"""
