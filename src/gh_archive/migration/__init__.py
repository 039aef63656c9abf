"""Archive and migration pipelines."""

from .gate import ConfirmationGate
from .orchestrator import MigrationOrchestrator, PipelineRun, classify_error
from .state import Event, Flow, InvalidTransitionError, transition

__all__ = [
    'ConfirmationGate',
    'MigrationOrchestrator',
    'PipelineRun',
    'classify_error',
    'Event',
    'Flow',
    'InvalidTransitionError',
    'transition',
]
