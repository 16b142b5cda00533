from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

import pandas as pd

from .columns import GPA, GRE, ID, OUTCOME, TREATMENT, TREATMENT_PROBABILITY

logger = logging.getLogger(__name__)

EXPORT_COLUMNS: tuple[str, ...] = (ID, GPA, GRE, TREATMENT_PROBABILITY, TREATMENT)


class Exporter:
    """
    Projects a finished cohort onto the public schema and writes it as CSV.

    The file is UTF-8, comma separated, with one header row, one row per
    unit, ``\\n`` line endings and no index column. Columns appear in the
    order of ``EXPORT_COLUMNS``, with ``outcome`` appended when
    ``include_outcome`` is set.

    Writes go to a temporary file beside the target which is renamed into
    place only once complete, so a failed write never leaves a partial file.
    """

    def __init__(self, include_outcome: bool = False) -> None:
        self._include_outcome = include_outcome

    @property
    def columns(self) -> list[str]:
        cols = list(EXPORT_COLUMNS)
        if self._include_outcome:
            cols.append(OUTCOME)
        return cols

    def to_frame(self, data: pd.DataFrame) -> pd.DataFrame:
        """The exported projection of ``data``, without writing anything."""
        missing = [c for c in self.columns if c not in data.columns]
        if missing:
            raise ValueError(
                f"Cannot export: columns {missing} not found in dataframe. "
                f"Available columns: {list(data.columns)}"
            )
        return data.loc[:, self.columns].reset_index(drop=True)

    def to_csv_string(self, data: pd.DataFrame) -> str:
        return self.to_frame(data).to_csv(index=False, lineterminator="\n")

    def write(self, data: pd.DataFrame, path: Union[str, Path]) -> Path:
        """Write ``data`` to ``path`` atomically and return the path."""
        path = Path(path)
        text = self.to_csv_string(data)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info("Wrote %d units to %s", len(data), path)
        return path
