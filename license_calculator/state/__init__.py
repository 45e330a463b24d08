"""Reactive state package: the Store and everything that writes through it."""

from license_calculator.state.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    ScheduledCall,
    Scheduler,
)
from license_calculator.state.debounce import Debouncer
from license_calculator.state.store import Store
from license_calculator.state.autosave import AutosavePipeline
from license_calculator.state.reorder import ReorderReconciler

__all__ = [
    "AsyncioScheduler",
    "AutosavePipeline",
    "Debouncer",
    "ManualScheduler",
    "ReorderReconciler",
    "ScheduledCall",
    "Scheduler",
    "Store",
]
