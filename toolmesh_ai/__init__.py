"""ToolMesh-AI.

This package contains the tool invocation and orchestration engine used by
ToolMesh-AI to expose a catalog of independently hosted AI inference
capabilities ("tools") as a single invocable, composable and chargeable
surface.

High-level architecture
-----------------------

- ``toolmesh_ai.registry``: the capability registry. Owns tool definitions,
  input validation, price calculation and advisory health state.
- ``toolmesh_ai.execution``: the execution adapter. Hides the difference
  between synchronous tools and queue (submit-and-poll) tools behind one
  ``invoke`` coroutine.
- ``toolmesh_ai.planning``: plan models, the dependency-graph executor, the
  LLM-backed plan generator and pre-built workflow templates.
- ``toolmesh_ai.credits``: the credit ledger interface consumed by the
  gateway, plus an in-memory reference implementation.
- ``toolmesh_ai.gateway``: the JSON-RPC 2.0 (MCP dialect) handler and the
  session registry used by the push-based transport.
- ``toolmesh_ai.server``: the FastAPI application exposing the gateway over
  SSE and stateless HTTP transports.

Typical workflow
----------------

1. A caller lists tools via ``tools/list``.
2. The caller invokes a tool directly via ``tools/call`` or hands a goal to
   the ``orchestrate`` meta-tool.
3. For orchestration, a plan is generated (or taken from a template) and
   executed in dependency waves; failed steps cascade to their dependents
   as skips.
4. Metered callers are charged per call through the credit ledger.
"""

__version__ = "0.1.0"
