# power_budget/utils/errors.py
"""Error types and formatting utilities."""

class PowerBudgetError(Exception):
    """Base class for errors raised by the allocator and its tooling."""
    pass

class DuplicateConsumerError(PowerBudgetError):
    """A consumer with the same identity is already connected."""

    def __init__(self, consumer_id):
        super().__init__(f"Consumer '{consumer_id}' is already connected")
        self.consumer_id = consumer_id

class InvalidAmountError(PowerBudgetError, ValueError):
    """Requested allocation is not a finite number."""

    def __init__(self, consumer_id, amount):
        super().__init__(f"Amount for consumer '{consumer_id}' must be a finite number (got {amount!r})")
        self.consumer_id = consumer_id
        self.amount = amount

class ConfigError(PowerBudgetError):
    """Invalid allocator configuration."""
    pass

class ScenarioError(PowerBudgetError):
    """Malformed scenario definition."""
    pass

def format_error(error_type, message, suggestion=None):
    """Format an error message for display.

    Args:
        error_type (str): Type of error (e.g., "DUPLICATE_CONSUMER")
        message (str): Error message
        suggestion (str, optional): Helpful suggestion for the user

    Returns:
        str: Formatted error message
    """
    output = f"⚠ {error_type}: {message}"
    if suggestion:
        output += f"\n  → {suggestion}"
    return output

def format_warning(message):
    """Format a warning message for display."""
    return f"⚠ WARNING: {message}"

def invalid_range_error(param_name, min_val, max_val, current_val=None):
    """Format an invalid range error.

    Args:
        param_name (str): Parameter name
        min_val: Minimum allowed value
        max_val: Maximum allowed value
        current_val: Current invalid value (optional)

    Returns:
        str: Formatted error message
    """
    message = f"{param_name} must be between {min_val} and {max_val}"
    if current_val is not None:
        message += f" (got {current_val})"
    return format_error("INVALID_RANGE", message)

def success_dict(message, **kwargs):
    """Create a success response dictionary.

    Args:
        message (str): Success message
        **kwargs: Additional fields to include in response

    Returns:
        dict: Success dictionary
    """
    result = {
        "ok": True,
        "status": message
    }
    result.update(kwargs)
    return result

def error_dict(error_type, message, **kwargs):
    """Create an error response dictionary.

    Args:
        error_type (str): Error type
        message (str): Error message
        **kwargs: Additional fields to include in response

    Returns:
        dict: Error dictionary
    """
    result = {
        "ok": False,
        "error": error_type,
        "message": message
    }
    result.update(kwargs)
    return result
