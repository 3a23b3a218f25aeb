"""
Unit tests for CSV data loaders

Tests that the target band table loads from CSV, is cached, and that a
malformed table fails the load instead of dropping parameters.
"""

import pytest
from core.schemas import ChemicalParameterId, TargetRange
from data.csv_loaders import (
    load_target_ranges_from_csv,
    clear_caches,
    TARGET_RANGES_CSV,
)

HEADER = "parameter_id,label,unit,min,max,step,source\n"
VALID_ROWS = [
    "ph,pH,,7.2,7.6,0.1,test\n",
    "freeChlorine,Free Chlorine,ppm,1.0,3.0,0.1,test\n",
    "totalAlkalinity,Total Alkalinity,ppm,80,120,1,test\n",
    "cyanuricAcid,Cyanuric Acid,ppm,30,50,1,test\n",
    "calciumHardness,Calcium Hardness,ppm,150,300,1,test\n",
    "salt,Salt,ppm,2700,3400,100,test\n",
]


def write_table(tmp_path, rows):
    path = tmp_path / "ranges.csv"
    path.write_text(HEADER + "".join(rows), encoding="utf-8")
    return path


class TestTargetRangesCSVLoader:
    """Test target_ranges.csv loader"""

    def test_shipped_file_exists(self):
        assert TARGET_RANGES_CSV.exists()

    def test_load_returns_every_parameter(self):
        """Every parameter has exactly one band"""
        ranges = load_target_ranges_from_csv()
        assert set(ranges) == set(ChemicalParameterId)
        assert all(isinstance(r, TargetRange) for r in ranges.values())

    def test_ph_band(self):
        ph = load_target_ranges_from_csv()[ChemicalParameterId.PH]
        assert ph.min == 7.2
        assert ph.max == 7.6
        assert ph.unit == ""
        assert ph.step == pytest.approx(0.1)

    def test_ppm_bands(self):
        """Band values used by the field forms"""
        ranges = load_target_ranges_from_csv()
        expected = {
            ChemicalParameterId.FREE_CHLORINE: (1.0, 3.0),
            ChemicalParameterId.TOTAL_ALKALINITY: (80, 120),
            ChemicalParameterId.CYANURIC_ACID: (30, 50),
            ChemicalParameterId.CALCIUM_HARDNESS: (150, 300),
            ChemicalParameterId.SALT: (2700, 3400),
        }
        for pid, (low, high) in expected.items():
            assert (ranges[pid].min, ranges[pid].max) == (low, high)
            assert ranges[pid].unit == "ppm"

    def test_every_band_has_min_below_max(self):
        for band in load_target_ranges_from_csv().values():
            assert band.min < band.max

    def test_caching(self):
        """Test that repeated calls use cache"""
        clear_caches()

        ranges1 = load_target_ranges_from_csv()
        ranges2 = load_target_ranges_from_csv()

        assert ranges1 is ranges2

    def test_cache_clear(self):
        """Test cache clearing"""
        ranges1 = load_target_ranges_from_csv()
        clear_caches()
        ranges2 = load_target_ranges_from_csv()

        # After clear, should reload (different object)
        assert ranges1 is not ranges2
        assert ranges1 == ranges2


class TestCustomTables:
    """Loading alternate tables and rejecting bad ones"""

    def test_custom_table_loads(self, tmp_path):
        rows = list(VALID_ROWS)
        rows[0] = "ph,pH,,7.0,7.8,0.1,test\n"
        ranges = load_target_ranges_from_csv(write_table(tmp_path, rows))
        assert ranges[ChemicalParameterId.PH].min == 7.0

    def test_custom_table_not_cached(self, tmp_path):
        path = write_table(tmp_path, VALID_ROWS)
        assert load_target_ranges_from_csv(path) is not load_target_ranges_from_csv(path)
        # Default table unaffected
        assert load_target_ranges_from_csv()[ChemicalParameterId.PH].min == 7.2

    def test_aliases_accepted_in_table(self, tmp_path):
        rows = list(VALID_ROWS)
        rows[1] = "chlorine,Free Chlorine,ppm,1.0,3.0,0.1,test\n"
        ranges = load_target_ranges_from_csv(write_table(tmp_path, rows))
        assert ChemicalParameterId.FREE_CHLORINE in ranges

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_target_ranges_from_csv(tmp_path / "nope.csv")

    def test_min_not_below_max_rejected(self, tmp_path):
        rows = list(VALID_ROWS)
        rows[0] = "ph,pH,,7.6,7.2,0.1,test\n"
        with pytest.raises(ValueError, match="invalid target range row"):
            load_target_ranges_from_csv(write_table(tmp_path, rows))

    def test_non_numeric_bound_rejected(self, tmp_path):
        rows = list(VALID_ROWS)
        rows[2] = "totalAlkalinity,Total Alkalinity,ppm,low,120,1,test\n"
        with pytest.raises(ValueError):
            load_target_ranges_from_csv(write_table(tmp_path, rows))

    def test_unknown_parameter_rejected(self, tmp_path):
        rows = VALID_ROWS + ["phosphate,Phosphate,ppb,0,100,10,test\n"]
        with pytest.raises(ValueError, match="invalid target range row"):
            load_target_ranges_from_csv(write_table(tmp_path, rows))

    def test_duplicate_rejected(self, tmp_path):
        rows = VALID_ROWS + ["ph,pH,,7.0,7.8,0.1,test\n"]
        with pytest.raises(ValueError, match="duplicate"):
            load_target_ranges_from_csv(write_table(tmp_path, rows))

    def test_missing_parameter_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="salt"):
            load_target_ranges_from_csv(write_table(tmp_path, VALID_ROWS[:-1]))


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
