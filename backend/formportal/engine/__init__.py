"""Approval Workflow Engine - pure chain state machine and chain construction"""
from .approval_engine import ApprovalWorkflowEngine
from .chain_builder import build_approval_chain

__all__ = [
    "ApprovalWorkflowEngine",
    "build_approval_chain",
]
