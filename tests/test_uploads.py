from pathlib import Path

from app.core.config import settings
from app.services import uploads
from app.services.uploads import extract_preview, safe_filename, save_upload


def test_safe_filename():
    assert safe_filename("report.pdf", now_ms=1700000000000) == "report_1700000000000.pdf"
    assert safe_filename("q3 予算 (final).txt", now_ms=1) == "q3_____final__1.txt"
    assert safe_filename("../../etc/passwd", now_ms=1) == "passwd_1"
    assert safe_filename(None, now_ms=1) == "upload_1.bin"
    long = safe_filename("a" * 200 + ".md", now_ms=5)
    assert long == "a" * 80 + "_5.md"


def test_preview_only_for_small_text():
    assert extract_preview(b"hello", "text/plain") == "hello"
    assert extract_preview(b'{"a": 1}', "application/json") == '{"a": 1}'
    assert extract_preview(b"\x89PNG", "image/png") == ""
    assert extract_preview(b"x", None) == ""
    assert extract_preview(b"x" * (settings.preview_max_bytes + 1), "text/plain") == ""
    assert len(extract_preview(b"y" * 10000, "text/csv")) == settings.preview_max_chars


def test_save_upload_writes_file(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "uploads_dir", str(tmp_path / "uploads"))
    stored = save_upload("notes.txt", b"budget notes", "text/plain")
    assert stored.local_path.read_bytes() == b"budget notes"
    assert stored.local_path.parent == tmp_path / "uploads"
    assert stored.public_path == f"/uploads/{stored.stored_name}"
    assert stored.preview == "budget notes"
    assert stored.size == 12


def test_uploads_dir_falls_back_to_tmp(tmp_path, monkeypatch):
    blocker = tmp_path / "file"
    blocker.write_text("not a dir")
    monkeypatch.setattr(uploads.tempfile, "gettempdir", lambda: str(tmp_path / "tmp"))
    out = uploads.ensure_uploads_dir(blocker / "uploads")
    assert out == Path(tmp_path / "tmp" / "uploads")
    assert out.is_dir()


def test_find_upload_checks_configured_then_fallback(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "uploads_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(uploads.tempfile, "gettempdir", lambda: str(tmp_path / "tmp"))
    (tmp_path / "tmp" / "uploads").mkdir(parents=True)
    (tmp_path / "tmp" / "uploads" / "b_1.txt").write_text("b")
    (tmp_path / "uploads").mkdir()
    (tmp_path / "uploads" / "a_1.txt").write_text("a")

    assert uploads.find_upload("a_1.txt") == tmp_path / "uploads" / "a_1.txt"
    assert uploads.find_upload("b_1.txt") == tmp_path / "tmp" / "uploads" / "b_1.txt"
    assert uploads.find_upload("c_1.txt") is None
    assert uploads.find_upload("../a_1.txt") is None
    assert uploads.find_upload("") is None
