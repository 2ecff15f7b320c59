from __future__ import annotations

from enum import Enum
from typing import Dict, List

# ---------------------------------------------------------------------------
# Controlled vocabularies
# ---------------------------------------------------------------------------


class GrowingAreaClass(str, Enum):
    """Regulatory classification of a shellfish growing area, least to most restrictive."""

    APPROVED = "A"
    CONDITIONALLY_APPROVED = "CA"
    CONDITIONALLY_RESTRICTED = "CR"
    RESTRICTED = "R"
    PROHIBITED = "P"
    UNCLASSIFIED = "X"

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


class TidePhase(str, Enum):
    """Tide stage at sampling time, in tidal-cycle order starting at low water."""

    LOW = "L"
    LOW_FLOOD = "LF"
    FLOOD = "F"
    HIGH_FLOOD = "HF"
    HIGH = "H"
    HIGH_EBB = "HE"
    EBB = "E"
    LOW_EBB = "LE"

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


CLASS_LEVELS: List[str] = [c.value for c in GrowingAreaClass]
TIDE_LEVELS: List[str] = [t.value for t in TidePhase]
MONTH_LEVELS: List[str] = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

ORDERED_CATEGORIES: Dict[str, List[str]] = {
    "Class": CLASS_LEVELS,
    "Tide": TIDE_LEVELS,
}

# ---------------------------------------------------------------------------
# Column layout of the monitoring file
# ---------------------------------------------------------------------------

SITE_COL = "SiteCode"
AREA_COL = "GROW_AREA"
DATE_COL = "SDate"
VALUE_COL = "ColiVal"
LEFT_FLAG = "LCFlag"
RIGHT_FLAG = "RCFlag"

REQUIRED_COLUMNS: List[str] = [
    SITE_COL,
    AREA_COL,
    "YEAR",
    DATE_COL,
    VALUE_COL,
    LEFT_FLAG,
    RIGHT_FLAG,
    "Class",
    "Tide",
    "Temp",
    "Sal",
]

OPTIONAL_COLUMNS: List[str] = ["SDateTime"]

FLOAT_COLUMNS: List[str] = [VALUE_COL, "Temp", "Sal"]
INTEGER_COLUMNS: List[str] = ["YEAR"]
UNORDERED_CATEGORIES: List[str] = [SITE_COL, AREA_COL]
FLAG_COLUMNS: List[str] = [LEFT_FLAG, RIGHT_FLAG]

# Fields that make a row a scheduled sample even when no count was reported.
METADATA_COLUMNS: List[str] = [SITE_COL, AREA_COL, "YEAR", DATE_COL]

DERIVED_COLUMNS: List[str] = ["DOY", "Month"]

COLUMN_LABELS: Dict[str, str] = {
    VALUE_COL: "E. coli (MPN/100 mL)",
    "Temp": "Water temperature (°C)",
    "Sal": "Salinity (ppt)",
    "DOY": "Day of year",
    "YEAR": "Year",
    "log_ColiVal": "log10 E. coli (MPN/100 mL)",
}


def column_label(column: str) -> str:
    return COLUMN_LABELS.get(column, column)


__all__ = [
    "GrowingAreaClass",
    "TidePhase",
    "CLASS_LEVELS",
    "TIDE_LEVELS",
    "MONTH_LEVELS",
    "ORDERED_CATEGORIES",
    "REQUIRED_COLUMNS",
    "OPTIONAL_COLUMNS",
    "FLOAT_COLUMNS",
    "INTEGER_COLUMNS",
    "UNORDERED_CATEGORIES",
    "FLAG_COLUMNS",
    "METADATA_COLUMNS",
    "DERIVED_COLUMNS",
    "column_label",
]
