from __future__ import annotations

from .model import MIFC_COLUMNS, NORMALIZATION_COLUMNS, CanonicalRecord, NormalizationInfo

__all__ = ["MIFC_COLUMNS", "NORMALIZATION_COLUMNS", "CanonicalRecord", "NormalizationInfo"]
