"""
Custom exception classes for demodb
"""

class DemoDBError(Exception):
    """Base exception for demodb"""
    pass

class ParseError(DemoDBError):
    """Statement parsing error"""
    pass

class UnsupportedStatementError(ParseError):
    """Statement does not match any recognized shape"""

    def __init__(self, normalized: str):
        self.statement = normalized
        super().__init__(
            f"Unsupported or invalid SQL query in demo mode: {normalized[:50]}..."
        )

class NotFoundError(DemoDBError):
    """Referenced database, table or row does not exist"""
    pass

class DatabaseNotFoundError(NotFoundError):
    """Database does not exist"""
    pass

class TableNotFoundError(NotFoundError):
    """Table does not exist"""
    pass

class RowNotFoundError(NotFoundError):
    """No row matches the predicate"""
    pass

class AlreadyExistsError(DemoDBError):
    """Create operation targets an existing name"""
    pass

class NoDatabaseSelectedError(DemoDBError):
    """Table-level statement issued without a current database"""

    def __init__(self, message: str = "No database selected."):
        super().__init__(message)

