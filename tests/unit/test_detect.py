"""
Unit tests for statement source detection (depot_import.detect).
"""

from __future__ import annotations

import pytest

from depot_import.config import ImportConfig
from depot_import.detect import depot_for_filename, depot_sources, detect_source
from depot_import.exceptions import ConfigValidationError, UnknownSourceError
from depot_import.layout_registry import StatementLayout
from depot_import.parsers.deka_csv import DekaCsvParser
from depot_import.parsers.tr_pdf import TrPdfParser
from depot_import.position import PositionSource


class TestDetectSource:

    def test_deka(self):
        parser_cls, layout = detect_source("deka", "Depot_20250101.CSV")
        assert parser_cls is DekaCsvParser
        assert layout.source is PositionSource.DEKA_CSV

    def test_tr(self):
        parser_cls, layout = detect_source("tr", "Depotauszug.pdf")
        assert parser_cls is TrPdfParser
        assert layout.source is PositionSource.TR_PDF

    def test_depot_code_normalized(self):
        parser_cls, _ = detect_source("  TR ", "statement.PDF")
        assert parser_cls is TrPdfParser

    def test_unknown_depot(self):
        with pytest.raises(UnknownSourceError, match="Unsupported depot_code"):
            detect_source("comdirect", "x.csv")

    def test_wrong_suffix(self):
        with pytest.raises(UnknownSourceError, match=r"Expected \.pdf"):
            detect_source("tr", "statement.csv")

    def test_suffix_check_can_be_disabled(self):
        cfg = ImportConfig(check_suffix=False)
        parser_cls, _ = detect_source("tr", "statement.bin", config=cfg)
        assert parser_cls is TrPdfParser

    def test_custom_depot_mapping(self):
        cfg = ImportConfig(depots={"family": "DEKA_CSV"})
        parser_cls, _ = detect_source("Family", "export.csv", config=cfg)
        assert parser_cls is DekaCsvParser

    def test_source_without_layout(self):
        layouts = [StatementLayout(source="TR_PDF", parser="pdf", file_suffix=".pdf")]
        cfg = ImportConfig(depots={"deka": "DEKA_CSV"})
        with pytest.raises(ConfigValidationError, match="no layout provides it"):
            detect_source("deka", "x.csv", config=cfg, layouts=layouts)

    def test_layouts_dir_from_config(self, tmp_path):
        (tmp_path / "deka.yaml").write_text(
            "source: DEKA_CSV\nparser: csv\ndepot_codes: [deka]\nfile_suffix: .txt\n", encoding="utf-8"
        )
        cfg = ImportConfig(layouts_dir=str(tmp_path))
        _, layout = detect_source("deka", "export.txt", config=cfg)
        assert layout.file_suffix == ".txt"


class TestDepotForFilename:

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [("Depot_20250101.CSV", "deka"), ("Depotauszug.pdf", "tr")],
    )
    def test_inferred(self, filename, expected):
        assert depot_for_filename(filename) == expected

    def test_no_match(self):
        with pytest.raises(UnknownSourceError):
            depot_for_filename("statement.xlsx")

    def test_ambiguous(self):
        cfg = ImportConfig(depots={"deka": "DEKA_CSV", "deka-2": "DEKA_CSV"})
        with pytest.raises(UnknownSourceError, match="Pass depot_code explicitly"):
            depot_for_filename("export.csv", config=cfg)


class TestLayoutDepotCodes:
    """Depot routing comes from the layouts' depot_codes unless the config overrides it."""

    @staticmethod
    def _layouts():
        return [
            StatementLayout(
                source="DEKA_CSV", parser="csv", depot_codes=["deka"], file_suffix=".csv"
            ),
            StatementLayout(
                source="DEKA_CSV",
                parser="csv",
                depot_codes=["Family"],
                file_suffix=".csv",
                csv={"delimiter": ",", "columns": {"isin": "Isin"}},
            ),
            StatementLayout(source="TR_PDF", parser="pdf", depot_codes=["tr"], file_suffix=".pdf"),
        ]

    def test_map_built_from_layouts(self):
        assert depot_sources(ImportConfig(), self._layouts()) == {
            "deka": PositionSource.DEKA_CSV,
            "family": PositionSource.DEKA_CSV,
            "tr": PositionSource.TR_PDF,
        }

    def test_layout_listing_the_depot_is_chosen(self):
        _, layout = detect_source("family", "export.csv", layouts=self._layouts())
        assert layout.csv.delimiter == ","
        assert layout.csv.columns.isin == "Isin"

    def test_depot_without_own_layout_uses_first_of_source(self):
        cfg = ImportConfig(depots={"other": "DEKA_CSV"})
        _, layout = detect_source("other", "export.csv", config=cfg, layouts=self._layouts())
        assert layout.depot_codes == ["deka"]

    def test_config_overrides_layout_claim(self):
        cfg = ImportConfig(depots={"tr": "DEKA_CSV"})
        parser_cls, _ = detect_source("tr", "export.csv", config=cfg, layouts=self._layouts())
        assert parser_cls is DekaCsvParser

    def test_unlisted_depot_is_unknown(self):
        layouts = [StatementLayout(source="TR_PDF", parser="pdf", depot_codes=["tr"])]
        with pytest.raises(UnknownSourceError, match="Known depots"):
            detect_source("deka", "x.csv", layouts=layouts)

    def test_first_layout_keeps_contested_code(self):
        layouts = [
            StatementLayout(source="TR_PDF", parser="pdf", depot_codes=["x"]),
            StatementLayout(source="DEKA_CSV", parser="csv", depot_codes=["x"]),
        ]
        assert depot_sources(ImportConfig(), layouts) == {"x": PositionSource.TR_PDF}

    def test_yaml_layout_adds_depot(self, tmp_path):
        (tmp_path / "deka.yaml").write_text(
            "source: DEKA_CSV\nparser: csv\ndepot_codes: [deka, joint]\nfile_suffix: .csv\n",
            encoding="utf-8",
        )
        cfg = ImportConfig(layouts_dir=str(tmp_path))
        parser_cls, _ = detect_source("Joint", "export.csv", config=cfg)
        assert parser_cls is DekaCsvParser
        with pytest.raises(UnknownSourceError, match="Pass depot_code explicitly"):
            depot_for_filename("export.csv", config=cfg)
