"""Local record stores.

Each store is constructed explicitly and owned by exactly one in-process
instance; there are no module-level singletons.

Key Components:
    - JsonRecordStore: generic ordered store backed by one JSON file
    - IssueStore: issues, with remote identity uniqueness
    - AgentTaskStore: coding-agent tasks
    - StoreEvent / StoreEventKind: change notifications for subscribers
"""

from ideae.store.agents import AgentTaskStore
from ideae.store.base import JsonRecordStore, StoreEvent, StoreEventKind
from ideae.store.issues import IssueStore

__all__ = [
    "AgentTaskStore",
    "IssueStore",
    "JsonRecordStore",
    "StoreEvent",
    "StoreEventKind",
]
