"""ID Generation Utilities"""
import uuid
from datetime import datetime, timezone
from typing import Optional


def generate_id(prefix: Optional[str] = None) -> str:
    """
    Generate a unique ID with optional prefix

    Args:
        prefix: Optional prefix for the ID (e.g., 'SUB', 'APV')

    Returns:
        Unique ID string

    Examples:
        >>> generate_id('SUB')
        'SUB-a1b2c3d4e5f6'
    """
    unique_part = uuid.uuid4().hex[:12]

    if prefix:
        return f"{prefix}-{unique_part}"
    return unique_part


def generate_submission_id() -> str:
    """Generate submission ID"""
    return generate_id("SUB")


def generate_step_id() -> str:
    """Generate approval step ID"""
    return generate_id("APV")


def format_reference_number(prefix: str, year: int, sequence: int) -> str:
    """
    Build the human-readable reference number shown to students and staff

    Examples:
        >>> format_reference_number('FRM', 2026, 42)
        'FRM-2026-000042'
    """
    return f"{prefix}-{year}-{sequence:06d}"


def generate_correlation_id() -> str:
    """
    Generate a correlation ID for request tracing

    Returns:
        Correlation ID string with timestamp prefix
    """
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    unique_part = uuid.uuid4().hex[:8]
    return f"COR-{timestamp}-{unique_part}"
