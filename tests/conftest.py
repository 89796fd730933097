"""Pytest configuration and fixtures."""

import io
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from pypdf import PdfWriter

from app.pdf_parser.config import Settings
from app.pdf_parser.main import create_app
from app.pdf_parser.services.pdf_service import PDFService, get_pdf_service


def _stream_object(data: bytes) -> bytes:
    return b"<< /Length %d >>\nstream\n" % len(data) + data + b"\nendstream"


def build_pdf(content: bytes, to_unicode: bytes | None = None) -> bytes:
    """
    Assemble a one-page PDF whose page draws ``content`` with Helvetica as /F1.

    ``to_unicode`` is attached to the font as its ToUnicode CMap. Object
    offsets are computed so the cross-reference table is exact.
    """
    font = b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica"
    if to_unicode is not None:
        font += b" /ToUnicode 6 0 R"
    font += b" >>"

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        _stream_object(content),
        font,
    ]
    if to_unicode is not None:
        objects.append(_stream_object(to_unicode))

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_offset
    return bytes(out)


def build_text_pdf(text: str) -> bytes:
    """Assemble a one-page PDF that draws ``text`` in Helvetica."""
    return build_pdf(b"BT /F1 24 Tf 72 720 Td (" + text.encode("latin-1") + b") Tj ET")


# Maps character code 0x01 to a lone high surrogate
SURROGATE_CMAP = b"""/CIDInit /ProcSet findresource begin
12 dict begin
begincmap
/CMapName /Surrogate def
/CMapType 2 def
1 begincodespacerange
<00> <FF>
endcodespacerange
1 beginbfchar
<01> <D800>
endbfchar
endcmap
CMapName currentdict /CMap defineresource pop
end
end"""


class StubPDFService(PDFService):
    """PDF service whose parse step always raises the given error."""

    def __init__(self, error: Exception):
        self.error = error
        self.calls = 0

    def parse(self, file_bytes):
        self.calls += 1
        raise self.error


@pytest.fixture
def settings() -> Settings:
    """Settings with a small upload limit so size checks stay cheap."""
    return Settings(max_upload_bytes=64 * 1024)


@pytest.fixture
def client(settings: Settings) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def failing_service(client: TestClient):
    """
    Install a stub PDF service on the client's app.

    Returns a factory taking the exception the stub should raise.
    """

    def install(error: Exception) -> StubPDFService:
        stub = StubPDFService(error)
        client.app.dependency_overrides[get_pdf_service] = lambda: stub
        return stub

    yield install
    client.app.dependency_overrides.clear()


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """A two-page blank PDF with a document information dictionary."""
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    writer.add_blank_page(width=595, height=842)
    writer.add_metadata({"/Title": "Test Document", "/Author": "Test Suite"})

    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def text_pdf_bytes() -> bytes:
    """A one-page PDF containing the text 'Hello PDF'."""
    return build_text_pdf("Hello PDF")


@pytest.fixture
def surrogate_pdf_bytes() -> bytes:
    """A one-page PDF whose ToUnicode map decodes its only glyph to U+D800."""
    return build_pdf(b"BT /F1 24 Tf 72 720 Td <01> Tj ET", to_unicode=SURROGATE_CMAP)


@pytest.fixture
def invalid_file_bytes() -> bytes:
    """Create invalid (non-PDF) file bytes for testing."""
    return b"This is not a PDF file"
