from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd

from backend.core.schema import DashboardRow
from backend.core.weeks import WEEKDAY_LABELS

EXPORT_COLUMNS = ["employee", "job", *WEEKDAY_LABELS, "total", "billable", "status"]

SUPPORTED_FORMATS = {"csv", "xlsx"}


def export_weekly_timesheets(path: Path, rows: Iterable[DashboardRow], fmt: str = "csv") -> Path:
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"unsupported export format: {fmt}")
    records = [row.model_dump(include=set(EXPORT_COLUMNS)) for row in rows]
    df = pd.DataFrame(records, columns=EXPORT_COLUMNS)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "xlsx":
        df.to_excel(path, index=False, sheet_name="Weekly timesheets", engine="openpyxl")
    else:
        df.to_csv(path, index=False)
    return path
