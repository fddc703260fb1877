import pytest

from notes_backend.api.errors import PdfRenderError
from notes_backend.api.pdf import PdfExporter
from notes_backend.api.rendering import render_markdown


def test_render_basic_markdown():
    assert render_markdown("# Title") == "<h1>Title</h1>"
    assert render_markdown("**bold** and *italic*") == "<p><strong>bold</strong> and <em>italic</em></p>"


def test_render_lists():
    html = render_markdown("- one\n- two")
    assert "<ul>" in html
    assert "<li>one</li>" in html


def test_render_escapes_raw_html():
    html = render_markdown("<script>alert(1)</script>")
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_render_strips_unsafe_link_attributes():
    html = render_markdown('<a href="https://example.com" onclick="steal()">x</a>')
    assert "onclick" not in html
    assert 'href="https://example.com"' in html


def test_render_empty_text():
    assert render_markdown("") == ""


def test_pdf_exporter_produces_pdf():
    data = PdfExporter().render(render_markdown("# Hello\n\nSome *text*."), title="Hello")
    assert data.startswith(b"%PDF")


def test_pdf_exporter_wraps_failures(monkeypatch):
    from notes_backend.api import pdf

    def explode(*args, **kwargs):
        raise RuntimeError("renderer down")

    monkeypatch.setattr(pdf.pisa, "CreatePDF", explode)
    with pytest.raises(PdfRenderError):
        PdfExporter().render("<p>x</p>")
