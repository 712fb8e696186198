from plancanvas.pipeline.changes import GraphChange, diff_graph
from plancanvas.pipeline.controller import (
    CanvasSyncController,
    default_reconcilers,
    normalize_stage_data,
)
from plancanvas.pipeline.stage import Entity, Link, StageReconciler
from plancanvas.pipeline.ideation_stage import IdeationReconciler
from plancanvas.pipeline.feature_stage import FeatureReconciler
from plancanvas.pipeline.structure_stage import StructureReconciler
from plancanvas.pipeline.architecture_stage import ArchitectureReconciler
from plancanvas.pipeline.interface_stage import InterfaceReconciler
from plancanvas.pipeline.auth_stage import AuthReconciler
from plancanvas.pipeline.writeback import EditProjector

__all__ = [
    "GraphChange",
    "diff_graph",
    "CanvasSyncController",
    "default_reconcilers",
    "normalize_stage_data",
    "Entity",
    "Link",
    "StageReconciler",
    "IdeationReconciler",
    "FeatureReconciler",
    "StructureReconciler",
    "ArchitectureReconciler",
    "InterfaceReconciler",
    "AuthReconciler",
    "EditProjector",
]
