"""Input validation exceptions"""

from typing import Any, Dict, Optional

from .provisioning_exceptions import ProvisioningError


class ValidationError(ProvisioningError, ValueError):
    """Raised when an input argument fails validation"""
    
    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None):
        super().__init__(
            message,
            error_code="VALIDATION_FAILED",
            details={"field": field, "value": value}
        )
        self.field = field
        self.value = value
    
    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['field'] = self.field
        return result


class InvalidDatasetNameError(ValidationError):
    """Dataset name validation failed"""
    
    def __init__(self, dataset_name: str, reason: str):
        super().__init__(f"Invalid dataset name '{dataset_name}'. {reason}", 'dataset_name', dataset_name)
        self.dataset_name = dataset_name
        self.reason = reason


class MissingArgumentError(ValidationError):
    """A required argument was not supplied"""
    
    def __init__(self, argument: str):
        super().__init__(f"Missing <{argument}> argument.", argument, None)
        self.argument = argument
