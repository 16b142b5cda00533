import csv

import pandas as pd
import pytest

from synthcohort import EXPORT_COLUMNS, Exporter, generate_cohort


@pytest.fixture(scope="module")
def cohort():
    return generate_cohort(n=200, seed=4660)


class TestExporter:
    def test_header_and_row_count(self, cohort, tmp_path):
        path = cohort.to_csv(tmp_path / "cohort.csv")
        with open(path, newline="", encoding="utf-8") as fh:
            rows = list(csv.reader(fh))
        assert rows[0] == ["id", "gpa", "gre", "treatment_probability", "treatment"]
        assert len(rows) == 201

    def test_columns_constant(self):
        assert EXPORT_COLUMNS == ("id", "gpa", "gre", "treatment_probability", "treatment")

    def test_include_outcome(self, cohort, tmp_path):
        path = cohort.to_csv(tmp_path / "cohort.csv", include_outcome=True)
        assert list(pd.read_csv(path).columns) == list(EXPORT_COLUMNS) + ["outcome"]

    def test_values_round_trip(self, cohort, tmp_path):
        path = cohort.to_csv(tmp_path / "cohort.csv")
        df = pd.read_csv(path)
        assert df["id"].tolist() == list(range(1, 201))
        assert df["gre"].dtype.kind == "i"
        assert set(df["treatment"].unique()) <= {0, 1}

    def test_byte_identical_across_runs(self, tmp_path):
        a = generate_cohort(n=500, seed=4660).to_csv(tmp_path / "a.csv")
        b = generate_cohort(n=500, seed=4660).to_csv(tmp_path / "b.csv")
        assert a.read_bytes() == b.read_bytes()

    def test_unix_line_endings(self, cohort, tmp_path):
        raw = cohort.to_csv(tmp_path / "cohort.csv").read_bytes()
        assert b"\r\n" not in raw
        assert raw.endswith(b"\n")

    def test_missing_column_raises_and_writes_nothing(self, cohort, tmp_path):
        path = tmp_path / "cohort.csv"
        with pytest.raises(ValueError, match="Cannot export"):
            Exporter().write(cohort.data.drop(columns=["gre"]), path)
        assert list(tmp_path.iterdir()) == []

    def test_failed_write_leaves_existing_file(self, cohort, tmp_path, monkeypatch):
        path = tmp_path / "cohort.csv"
        path.write_text("previous\n", encoding="utf-8")

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("synthcohort.export.os.replace", boom)
        with pytest.raises(OSError, match="disk full"):
            Exporter().write(cohort.data, path)
        assert path.read_text(encoding="utf-8") == "previous\n"
        assert [p.name for p in tmp_path.iterdir()] == ["cohort.csv"]

    def test_to_frame_is_pure_projection(self, cohort):
        frame = Exporter().to_frame(cohort.data)
        pd.testing.assert_frame_equal(frame, cohort.data[list(EXPORT_COLUMNS)])
