"""
Tests for input sanitization helpers.
"""

import pytest

from helpers.sanitization import sanitize_filename, sanitize_plain_text, sanitize_url


class TestSanitizePlainText:
    """Tests for sanitize_plain_text."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("<b>Clase</b> de mate", "Clase de mate"),
            ("  sin etiquetas  ", "sin etiquetas"),
            ("<p></p>", ""),
            ("¿Quién trae el proyector?", "¿Quién trae el proyector?"),
        ],
    )
    def test_strips_tags(self, raw, expected):
        assert sanitize_plain_text(raw) == expected

    def test_none_passes_through(self):
        assert sanitize_plain_text(None) is None


class TestSanitizeUrl:
    """Tests for sanitize_url."""

    @pytest.mark.parametrize(
        "url",
        ["https://meet.google.com/abc", "http://example.com", "mailto:profe@loyola.edu.mx", "/media/a.png"],
    )
    def test_allowed(self, url):
        assert sanitize_url(url) == url

    @pytest.mark.parametrize("url", ["javascript:alert(1)", "data:text/html;base64,xx", "vbscript:x"])
    def test_rejected(self, url):
        assert sanitize_url(url) == ""


class TestSanitizeFilename:
    """Tests for sanitize_filename."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("../../etc/passwd", "passwd"),
            ("C:\\Users\\ana\\tarea.docx", "tarea.docx"),
            ("Guía <final>.pdf", "Guía _final_.pdf"),
            ("...", "archivo"),
            (None, "archivo"),
        ],
    )
    def test_reduces_to_basename(self, raw, expected):
        assert sanitize_filename(raw) == expected
