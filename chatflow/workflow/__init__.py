"""
Workflow Engine
===============

Sequences agents over a directed graph with condition-gated nodes:

    WorkflowFactory ──► WorkflowGraphBuilder ──► WorkflowGraph
                                                     │
                                                     ▼
                        ExecutionContext ──► WorkflowManager ──► AgentResult
                                                     │
                                                     └──► WorkflowEvents / stream()
"""

from chatflow.workflow.types import (
    Edge,
    EdgePolicy,
    Node,
    WorkflowEvent,
    WorkflowEvents,
    WorkflowEventType,
    WorkflowGraph,
    WorkflowStatus,
)
from chatflow.workflow.manager import WorkflowManager
from chatflow.workflow.builder import WorkflowGraphBuilder
from chatflow.workflow.factory import WorkflowFactory, determine_workflow_type

__all__ = [
    "Edge",
    "EdgePolicy",
    "Node",
    "WorkflowEvent",
    "WorkflowEvents",
    "WorkflowEventType",
    "WorkflowGraph",
    "WorkflowStatus",
    "WorkflowManager",
    "WorkflowGraphBuilder",
    "WorkflowFactory",
    "determine_workflow_type",
]
