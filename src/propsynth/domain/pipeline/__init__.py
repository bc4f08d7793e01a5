"""Proposal build pipeline: extraction, routing, aggregation and reconciliation."""

from __future__ import annotations

from .aggregation import ProposalAggregationPhase, aggregate_proposals, proposal_id
from .context import BuildContext, BuildState, BuildStats, GroupFilter
from .errors import CoverageError, FatalBuildError, HashCollisionError, UnknownHierarchyError
from .extraction import ExtractionResult, SelectionCriteriaPhase, extract_selection_criteria
from .identity import (
    HashAccepted,
    HashCollision,
    HashOutcome,
    HashRegistry,
    canonical_json,
    configuration_payload,
    hierarchy_payload,
    sha256_hex,
)
from .orchestrator import PipelinePhase, ProposalPipeline
from .routing import AnomalyRoutingPhase, GroupEntropy, RoutingResult, route_criteria
from .runner import build_proposals, default_pipeline
from .temporal import (
    TemporalReconciliationPhase,
    check_coverage,
    continuation_id,
    reconcile_group,
    reconcile_proposals,
)

__all__ = [
    "AnomalyRoutingPhase",
    "BuildContext",
    "BuildState",
    "BuildStats",
    "CoverageError",
    "ExtractionResult",
    "FatalBuildError",
    "GroupEntropy",
    "GroupFilter",
    "HashAccepted",
    "HashCollision",
    "HashCollisionError",
    "HashOutcome",
    "HashRegistry",
    "PipelinePhase",
    "ProposalAggregationPhase",
    "ProposalPipeline",
    "RoutingResult",
    "SelectionCriteriaPhase",
    "TemporalReconciliationPhase",
    "UnknownHierarchyError",
    "aggregate_proposals",
    "build_proposals",
    "canonical_json",
    "check_coverage",
    "configuration_payload",
    "continuation_id",
    "default_pipeline",
    "extract_selection_criteria",
    "hierarchy_payload",
    "proposal_id",
    "reconcile_group",
    "reconcile_proposals",
    "route_criteria",
    "sha256_hex",
]
