"""Engine: plugin lifecycle orchestration and output reconciliation."""

from sourcebit.engine.orchestrator import Sourcebit, TransformCallback
from sourcebit.engine.reconciler import FileReconciler, ReconcileReport

__all__ = [
    "FileReconciler",
    "ReconcileReport",
    "Sourcebit",
    "TransformCallback",
]
