"""Workflows over the local stores: reconciliation, agent tasks and the board view."""

from ideae.engine.agent_tasks import AgentTaskService, AgentTaskTab, RefreshReport
from ideae.engine.board import BoardStats, IssueBoard
from ideae.engine.reconciler import ActionOutcome, OutcomeStatus, Reconciler, SyncReport

__all__ = [
    "ActionOutcome",
    "AgentTaskService",
    "AgentTaskTab",
    "BoardStats",
    "IssueBoard",
    "OutcomeStatus",
    "Reconciler",
    "RefreshReport",
    "SyncReport",
]
