"""
Workflow Types - Graph, event and status definitions for the workflow engine.

A graph is an immutable set of nodes and edges:

    Node(id, agent, condition?)     condition gates execution of the agent
    Edge(source, target, condition?)  condition is consulted only by
                                      the CONDITIONAL and BRANCHING policies
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Tuple, Union

from chatflow.agents.base import AgentResult, BaseAgent
from chatflow.models.schemas import ExecutionContext

Condition = Callable[[ExecutionContext], Union[bool, Awaitable[bool]]]


class WorkflowStatus(Enum):
    """Lifecycle of one WorkflowManager."""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class EdgePolicy(Enum):
    """
    How the next node is chosen after a node is visited.

    FIRST: first outgoing edge in registration order, edge conditions ignored
    CONDITIONAL: first outgoing edge whose condition passes
    BRANCHING: every passing successor runs, once each, in graph order
    """
    FIRST = "first"
    CONDITIONAL = "conditional"
    BRANCHING = "branching"


@dataclass(frozen=True)
class Node:
    """A graph vertex pairing an id with one agent."""
    id: str
    agent: BaseAgent
    condition: Optional[Condition] = None


@dataclass(frozen=True)
class Edge:
    """A directed connection between two node ids."""
    source: str
    target: str
    condition: Optional[Condition] = None


@dataclass(frozen=True)
class WorkflowGraph:
    """Immutable nodes and edges assembled for one workflow run."""
    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()
    entry: Optional[str] = None

    def node_ids(self) -> Tuple[str, ...]:
        return tuple(node.id for node in self.nodes)


@dataclass
class WorkflowEvents:
    """
    Optional callback hooks supplied when a workflow is built.

    Every hook may be a plain function or a coroutine function.
    """
    on_token: Optional[Callable[[str], Any]] = None
    on_tool_start: Optional[Callable[[str], Any]] = None
    on_tool_end: Optional[Callable[[str, AgentResult], Any]] = None
    on_complete: Optional[Callable[[AgentResult], Any]] = None


class WorkflowEventType(Enum):
    """Kinds of events yielded by WorkflowManager.stream()."""
    TOKEN = "token"
    TOOL_START = "tool_start"
    TOOL_END = "tool_end"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class WorkflowEvent:
    """One typed event from a streamed workflow run."""
    type: WorkflowEventType
    node_id: Optional[str] = None
    token: Optional[str] = None
    result: Optional[AgentResult] = None
    error: Optional[BaseException] = None
