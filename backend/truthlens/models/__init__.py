# Dataset model and API schemas
from truthlens.models.dataset import Dataset, Number, Text, Missing, MISSING
from truthlens.models.schemas import (
    AuditReport,
    CriticalFlag,
    RiskBadge,
    DataQualityMetrics,
    DriftReport,
    HallucinationResult,
    ExplainabilityResult,
)

__all__ = [
    "Dataset",
    "Number",
    "Text",
    "Missing",
    "MISSING",
    "AuditReport",
    "CriticalFlag",
    "RiskBadge",
    "DataQualityMetrics",
    "DriftReport",
    "HallucinationResult",
    "ExplainabilityResult",
]
