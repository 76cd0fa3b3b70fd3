"""Unit tests for the diagnostics collaborator."""

import logging

from src.utils.diagnostics import NULL_DIAGNOSTICS, Diagnostics


class TestDiagnostics:
    """Test suite for Diagnostics."""

    def test_record_and_count(self):
        """Test counting events and keeping their latest details."""
        diagnostics = Diagnostics()
        diagnostics.record("offset_kink", count=2)
        diagnostics.record("offset_kink", count=5)
        assert diagnostics.count("offset_kink") == 2
        assert diagnostics.details["offset_kink"] == {"count": 5}
        assert "offset_kink" in diagnostics
        assert "clothoid_arc" not in diagnostics

    def test_reset(self):
        """Test forgetting recorded events."""
        diagnostics = Diagnostics()
        diagnostics.record("clothoid_arc")
        diagnostics.reset()
        assert diagnostics.count("clothoid_arc") == 0
        assert not diagnostics.details

    def test_verbose_logging(self, caplog):
        """Test that verbose diagnostics log every event."""
        logger = logging.getLogger("tests.diagnostics")
        caplog.set_level(logging.DEBUG, logger="tests.diagnostics")
        diagnostics = Diagnostics(verbose=True, logger=logger)
        diagnostics.record("index_outside_region", size=3)
        assert "index_outside_region" in caplog.text

    def test_null_diagnostics(self):
        """Test that the null sink ignores events."""
        NULL_DIAGNOSTICS.record("offset_kink", count=1)
        assert NULL_DIAGNOSTICS.count("offset_kink") == 0
