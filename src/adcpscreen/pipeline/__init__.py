"""Pipeline modules.

- correction: Per-configuration correction pipeline
- state: Carried-forward correction state
- registry: Concurrent configuration registry
- notifier: Single-consumer membership notifications
- router: Frame, project-change and close signal handling
- options_store: SQLite-backed per-configuration options
- writer: Corrected frame writer thread
- orchestrator: Main pipeline controller
"""

from adcpscreen.pipeline.state import CorrectionState
from adcpscreen.pipeline.correction import EnsembleCorrectionPipeline, Stage
from adcpscreen.pipeline.events import MembershipEvent
from adcpscreen.pipeline.notifier import MembershipNotifier
from adcpscreen.pipeline.options_store import OptionsStore
from adcpscreen.pipeline.registry import ConfigRegistry
from adcpscreen.pipeline.router import StreamRouter
from adcpscreen.pipeline.writer import EnsembleWriter
from adcpscreen.pipeline.orchestrator import ScreeningOrchestrator

__all__ = [
    "ConfigRegistry",
    "CorrectionState",
    "EnsembleCorrectionPipeline",
    "EnsembleWriter",
    "MembershipEvent",
    "MembershipNotifier",
    "OptionsStore",
    "ScreeningOrchestrator",
    "Stage",
    "StreamRouter",
]
