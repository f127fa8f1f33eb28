"""
Workflow Manager - Walks a workflow graph, one agent at a time.

COMPLETE FLOW:
==============
1. execute(start_node_id)
        │
        ▼
2. For the current node:
   - evaluate the node condition (skip the agent if false)
   - on_tool_start → agent.execute(context) → on_tool_end
   - replace the working context with result.context
        │
        ▼
3. Pick the next node according to the EdgePolicy
   - no outgoing edges ends the walk normally
        │
        ▼
4. on_complete(final result), return AgentResult

Only one agent runs at a time. Agent errors are logged and re-raised
unchanged; the context is only replaced after an agent succeeds.
"""

import asyncio
import inspect
import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from chatflow.agents.base import AgentResult, BaseAgent
from chatflow.core.exceptions import NodeNotFoundError, WorkflowError
from chatflow.models.schemas import ExecutionContext
from chatflow.workflow.types import (
    Condition,
    Edge,
    EdgePolicy,
    Node,
    WorkflowEvent,
    WorkflowEvents,
    WorkflowEventType,
    WorkflowGraph,
    WorkflowStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "Workflow completed"


class WorkflowManager:
    """
    Executes a WorkflowGraph against one ExecutionContext.

    A manager is single-use: build a new one (via WorkflowGraphBuilder)
    for every run.
    """

    def __init__(
        self,
        graph: WorkflowGraph,
        initial_context: ExecutionContext,
        events: Optional[WorkflowEvents] = None,
        edge_policy: EdgePolicy = EdgePolicy.FIRST,
        max_steps: Optional[int] = None
    ):
        """
        Initialize the manager.

        Args:
            graph: Nodes and edges to walk
            initial_context: The run's context; replaced after each agent
            events: Optional callback hooks
            edge_policy: How the next node is chosen
            max_steps: Optional cap on node visits (None: unbounded)
        """
        self.graph = graph
        self.context = initial_context
        self.events = events or WorkflowEvents()
        self.edge_policy = edge_policy
        self.max_steps = max_steps
        self.status = WorkflowStatus.NOT_STARTED

        self._nodes: Dict[str, Node] = {node.id: node for node in graph.nodes}
        self._edges: Dict[str, List[Edge]] = {}
        for edge in graph.edges:
            self._edges.setdefault(edge.source, []).append(edge)

        self._listeners: List[Callable[[WorkflowEvent], None]] = []

        for node in graph.nodes:
            if not isinstance(node.agent, BaseAgent):
                continue
            previous = node.agent.on_token
            if previous is None:
                node.agent.on_token = self._emit_token
            else:
                logger.debug(f"Chaining existing token callback on node '{node.id}'")
                node.agent.on_token = self._chain_token(previous)

        logger.info(
            f"Workflow manager initialized: {len(self._nodes)} nodes, "
            f"{len(graph.edges)} edges, policy={edge_policy.value}"
        )

    async def execute(self, start_node_id: Optional[str] = None) -> AgentResult:
        """
        Run the workflow to completion.

        Args:
            start_node_id: Node to start from (default: the graph's entry)

        Returns:
            AgentResult with the last executed agent's output (or
            "Workflow completed") and the final context

        Raises:
            NodeNotFoundError: If the walk reaches an unregistered node id
            WorkflowError: If max_steps is exceeded
            Exception: Any agent or provider error, unchanged
        """
        if self.status != WorkflowStatus.NOT_STARTED:
            raise WorkflowError(f"Workflow manager already used (status: {self.status.value})")

        start = start_node_id or self.graph.entry
        if not start:
            raise WorkflowError("No start node given and the graph has no entry node")

        self.status = WorkflowStatus.RUNNING
        logger.info(f"Starting workflow execution at '{start}'")

        try:
            if self.edge_policy == EdgePolicy.BRANCHING:
                final_result = await self._walk_branches(start)
            else:
                final_result = await self._walk_chain(start)

            if final_result is not None:
                await self._fire(self.events.on_complete, final_result)
        except asyncio.CancelledError:
            self.status = WorkflowStatus.FAILED
            logger.warning("Workflow execution cancelled")
            raise
        except Exception as e:
            self.status = WorkflowStatus.FAILED
            logger.error(f"Workflow execution failed: {e}")
            raise

        self.status = WorkflowStatus.COMPLETED
        logger.info(f"Workflow execution completed ({len(self.context.intermediate_steps)} steps)")

        output = DEFAULT_OUTPUT
        if final_result is not None and final_result.output is not None:
            output = final_result.output
        return AgentResult(output=output, context=self.context)

    async def stream(self, start_node_id: Optional[str] = None) -> AsyncIterator[WorkflowEvent]:
        """
        Run the workflow, yielding typed events as they happen.

        Yields token, tool_start and tool_end events during the run, then
        one complete event. On failure yields one error event and re-raises
        the original exception. Closing the stream early cancels the run,
        which leaves the manager FAILED.
        """
        queue: asyncio.Queue = asyncio.Queue()
        done = object()

        listener = queue.put_nowait
        self._listeners.append(listener)
        task = asyncio.create_task(self.execute(start_node_id))
        task.add_done_callback(lambda _: queue.put_nowait(done))

        try:
            while True:
                event = await queue.get()
                if event is done:
                    break
                yield event

            try:
                result = await task
            except Exception as e:
                yield WorkflowEvent(type=WorkflowEventType.ERROR, error=e)
                raise

            yield WorkflowEvent(type=WorkflowEventType.COMPLETE, result=result)
        finally:
            self._listeners.remove(listener)
            if not task.done():
                task.cancel()
                # settle the run's status before the generator closes
                await asyncio.gather(task, return_exceptions=True)

    # ── Walks ────────────────────────────────────────────────────────────

    async def _walk_chain(self, start: str) -> Optional[AgentResult]:
        """Follow one edge per node until a node has no next node."""
        final_result = None
        current: Optional[str] = start
        steps = 0

        while current:
            node = self._get_node(current)
            steps = self._count_step(steps)

            result = await self._visit(node)
            if result is not None:
                final_result = result

            current = await self._next_node_id(current)
            logger.debug(f"Moving to next node: {current}")

        return final_result

    async def _walk_branches(self, start: str) -> Optional[AgentResult]:
        """
        Visit every node reachable through passing edges, once each.

        Ready nodes run in topological order of the graph (ties broken by
        registration order), so a node runs after every ready predecessor.
        """
        rank = self._topological_rank()
        final_result = None
        pending = {start}
        visited = set()
        steps = 0

        while pending:
            current = min(pending, key=lambda node_id: rank.get(node_id, len(rank)))
            pending.discard(current)
            node = self._get_node(current)
            visited.add(current)
            steps = self._count_step(steps)

            result = await self._visit(node)
            if result is not None:
                final_result = result

            for edge in self._edges.get(current, []):
                if edge.target not in visited and await self._evaluate(edge.condition):
                    pending.add(edge.target)

            logger.debug(f"Pending nodes after '{current}': {sorted(pending)}")

        return final_result

    # ── Node handling ────────────────────────────────────────────────────

    async def _visit(self, node: Node) -> Optional[AgentResult]:
        """Run the node's agent if its condition passes."""
        if not await self._evaluate(node.condition):
            logger.info(f"Skipping workflow node '{node.id}' (condition not met)")
            return None

        logger.info(f"Executing workflow node '{node.id}' ({node.agent.__class__.__name__})")
        await self._fire(self.events.on_tool_start, node.id)
        self._publish(WorkflowEvent(type=WorkflowEventType.TOOL_START, node_id=node.id))

        try:
            result = await node.agent.execute(self.context)
        except Exception as e:
            logger.error(f"Workflow node '{node.id}' failed: {e}", exc_info=True)
            raise

        self.context = result.context

        await self._fire(self.events.on_tool_end, node.id, result)
        self._publish(
            WorkflowEvent(type=WorkflowEventType.TOOL_END, node_id=node.id, result=result)
        )

        logger.info(f"Node execution completed: '{node.id}' (has output: {result.output is not None})")
        return result

    async def _next_node_id(self, node_id: str) -> Optional[str]:
        edges = self._edges.get(node_id, [])
        if not edges:
            return None

        if self.edge_policy == EdgePolicy.FIRST:
            return edges[0].target

        for edge in edges:
            if await self._evaluate(edge.condition):
                return edge.target
        return None

    def _get_node(self, node_id: str) -> Node:
        node = self._nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def _count_step(self, steps: int) -> int:
        steps += 1
        if self.max_steps is not None and steps > self.max_steps:
            raise WorkflowError(
                f"Workflow exceeded max_steps ({self.max_steps})",
                details={"max_steps": self.max_steps}
            )
        return steps

    def _topological_rank(self) -> Dict[str, int]:
        registration = list(self.graph.node_ids())
        indegree = {node_id: 0 for node_id in registration}
        for edge in self.graph.edges:
            if edge.target in indegree:
                indegree[edge.target] += 1

        order: List[str] = []
        ready = [node_id for node_id in registration if indegree[node_id] == 0]
        while ready:
            node_id = ready.pop(0)
            order.append(node_id)
            for edge in self._edges.get(node_id, []):
                if edge.target not in indegree:
                    continue
                indegree[edge.target] -= 1
                if indegree[edge.target] == 0:
                    ready.append(edge.target)
                    ready.sort(key=registration.index)

        # nodes on a cycle follow in registration order
        order.extend(node_id for node_id in registration if node_id not in order)
        return {node_id: index for index, node_id in enumerate(order)}

    # ── Events ───────────────────────────────────────────────────────────

    async def _evaluate(self, condition: Optional[Condition]) -> bool:
        if condition is None:
            return True
        passed = condition(self.context)
        if inspect.isawaitable(passed):
            passed = await passed
        return bool(passed)

    async def _emit_token(self, token: str) -> None:
        await self._fire(self.events.on_token, token)
        self._publish(WorkflowEvent(type=WorkflowEventType.TOKEN, token=token))

    def _chain_token(self, previous: Callable[[str], Any]) -> Callable[[str], Any]:
        """Token callback that calls the agent's own callback, then the manager's."""
        async def on_token(token: str) -> None:
            await self._fire(previous, token)
            await self._emit_token(token)
        return on_token

    def _publish(self, event: WorkflowEvent) -> None:
        for listener in self._listeners:
            listener(event)

    async def _fire(self, callback: Optional[Callable[..., Any]], *args: Any) -> None:
        if callback is None:
            return
        result = callback(*args)
        if inspect.isawaitable(result):
            await result
