"""API module - Routes and dependencies"""
from .deps import get_correlation_id_dep, get_staff_id_dep

__all__ = ["get_correlation_id_dep", "get_staff_id_dep"]
