"""Tests for logging emitted by the mapping engine."""

import logging

from attrmap import Mapper, SchemaModule, attribute


class Lookup(Mapper):
    street = attribute(str, source=lambda atts: atts["address"]["street"])
    zip_code = attribute(int, source="zip")


class TestEngineLogging:
    def test_failed_lookup_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="attrmap.core.resolver"):
            mapped = Lookup({})

        assert mapped.street is None
        records = [r for r in caplog.records if r.name == "attrmap.core.resolver"]
        assert len(records) == 1
        assert records[0].levelno == logging.DEBUG
        assert "'street'" in records[0].getMessage()
        assert "KeyError" in records[0].getMessage()

    def test_passthrough_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="attrmap.core.gate"):
            mapped = Lookup({"zip": "not-a-zip"})

        assert mapped.zip_code == "not-a-zip"
        assert any(
            "uncoerced" in r.getMessage()
            for r in caplog.records
            if r.name == "attrmap.core.gate"
        )

    def test_nothing_logged_above_debug(self, caplog):
        with caplog.at_level(logging.INFO, logger="attrmap"):
            Lookup({"zip": "not-a-zip"})
        assert [r for r in caplog.records if r.name.startswith("attrmap")] == []

    def test_extension_logged(self, caplog):
        class Extra(SchemaModule):
            note = attribute(str)

        mapped = Lookup({})
        with caplog.at_level(logging.DEBUG, logger="attrmap.mapper"):
            mapped.add_attributes(Extra, {"note": "hi"})

        assert any("Extended Lookup" in r.getMessage() for r in caplog.records)
