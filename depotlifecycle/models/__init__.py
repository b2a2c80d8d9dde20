"""Aggregate model imports so every table is registered on Base.metadata."""

from depotlifecycle.models.party import Party
from depotlifecycle.models.insurance import InsuranceCoverage
from depotlifecycle.models.release import (
    Release,
    ReleaseDetail,
    ReleaseDetailCriteria,
    ReleaseUnit,
)
from depotlifecycle.models.redelivery import (
    MachineryInfo,
    Redelivery,
    RedeliveryDetail,
    RedeliveryUnit,
)
from depotlifecycle.models.gate import Gate
from depotlifecycle.models.estimate import (
    Estimate,
    EstimateAllocation,
    EstimateLineItem,
    EstimateLineItemPart,
    EstimatePhoto,
)
from depotlifecycle.models.work_order import WorkOrder, WorkOrderUnit
from depotlifecycle.models.user import ApiUser

__all__ = [
    "Party", "InsuranceCoverage",
    # Release
    "Release", "ReleaseDetail", "ReleaseDetailCriteria", "ReleaseUnit",
    # Redelivery
    "Redelivery", "RedeliveryDetail", "RedeliveryUnit", "MachineryInfo",
    # Gate / estimate / work order
    "Gate",
    "Estimate", "EstimateAllocation", "EstimateLineItem", "EstimateLineItemPart", "EstimatePhoto",
    "WorkOrder", "WorkOrderUnit",
    # Auth
    "ApiUser",
]
