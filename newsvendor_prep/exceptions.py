class NewsvendorError(Exception):
    """Base exception for the newsvendor data preparation job."""
    
    def __init__(self, message=None, code=None, details=None):
        """Initialize the exception.
        
        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message or "An error occurred in the newsvendor preparation job"
        self.code = code
        self.details = details
        super().__init__(self.message)
    
    def __str__(self):
        """String representation of the error."""
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message
    
    def to_dict(self):
        """Convert the exception to a dictionary."""
        error_dict = {
            'error': self.__class__.__name__,
            'message': self.message,
        }
        
        if self.code:
            error_dict['code'] = self.code
            
        if self.details:
            error_dict['details'] = self.details
            
        return error_dict


class ConfigError(NewsvendorError):
    """Exception raised for configuration errors."""
    
    def __init__(self, message=None, code=None, details=None):
        message = message or "Configuration error"
        super().__init__(message, code, details)


class SchemaMismatchError(NewsvendorError):
    """Exception raised when an input row does not match its schema."""
    
    def __init__(self, message=None, code=None, details=None):
        message = message or "Schema mismatch"
        super().__init__(message, code, details)


class NotFoundError(NewsvendorError):
    """Exception raised when no input file matches a path pattern."""
    
    def __init__(self, message=None, code=None, details=None):
        message = message or "Resource not found"
        super().__init__(message, code, details)


class DataIntegrityError(NewsvendorError):
    """Exception raised when catalog invariants do not hold."""
    
    def __init__(self, message=None, code=None, details=None):
        message = message or "Data integrity error"
        super().__init__(message, code, details)


class DatabaseError(NewsvendorError):
    """Exception raised for database-related errors."""
    
    def __init__(self, message=None, code=None, details=None):
        message = message or "Database error"
        super().__init__(message, code, details)


class ReportingError(NewsvendorError):
    """Exception raised for export and script generation errors."""
    
    def __init__(self, message=None, code=None, details=None):
        message = message or "Reporting error"
        super().__init__(message, code, details)


class BatchProcessError(NewsvendorError):
    """Exception raised for batch process errors."""
    
    def __init__(self, message=None, code=None, details=None):
        message = message or "Batch process error"
        super().__init__(message, code, details)
