"""
Backend Scripts Module

Utility scripts for database operations and maintenance.

Available scripts:
    - seed_data.py: Creates the form catalogue and sample approvers
    - reconcile_submissions.py: Reports and repairs status drift

Usage:
    python -m scripts.seed_data
    python -m scripts.reconcile_submissions --repair
"""
