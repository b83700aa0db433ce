# /tests/test_file_rules.py

import io
from unittest.mock import MagicMock

import pytest

from app.core.errors import ValidationFailed
from app.services.submission_helpers import file_rules

from conftest import MIB, docx, make_upload, pdf, xlsx


def test_submission_batch_accepts_word_and_excel():
    file_rules.validate_submission_files([docx(), xlsx()])
    print("\n✅ SUCCESS: test_submission_batch_accepts_word_and_excel passed.")


def test_submission_batch_rejects_pdf():
    with pytest.raises(ValidationFailed) as exc_info:
        file_rules.validate_submission_files([docx(), pdf("answers.pdf")])
    assert '"answers.pdf" is not a valid file type' in exc_info.value.message


def test_submission_batch_requires_a_file():
    with pytest.raises(ValidationFailed):
        file_rules.validate_submission_files([])


def test_size_limit_is_inclusive():
    file_rules.validate_submission_files([docx(size=10 * MIB)])
    with pytest.raises(ValidationFailed) as exc_info:
        file_rules.validate_submission_files([docx("big.docx", size=10 * MIB + 1)])
    assert '"big.docx" is too large' in exc_info.value.message
    assert "10MB" in exc_info.value.message


def test_empty_file_is_rejected():
    with pytest.raises(ValidationFailed) as exc_info:
        file_rules.validate_submission_files([docx("blank.docx", size=0)])
    assert "empty" in exc_info.value.message


def test_marked_batch_allows_pdf_but_not_images():
    file_rules.validate_marked_files([pdf(), docx(), xlsx()])
    with pytest.raises(ValidationFailed):
        file_rules.validate_marked_files([make_upload("scan.png", "image/png", 10)])


@pytest.mark.parametrize("raw, expected", [
    ("answer.docx", "answer.docx"),
    ("My Answer (final).docx", "My_Answer_final_.docx"),
    ("../../etc/passwd", "passwd"),
    ("C:\\Users\\me\\work.xlsx", "work.xlsx"),
    ("...", "file"),
])
def test_safe_file_name(raw, expected):
    assert file_rules.safe_file_name(raw) == expected


def test_marked_names_single_file_has_no_suffix():
    names = file_rules.marked_display_names("Mock exam: Q1", [pdf()])
    assert names == ["Mock_exam_Q1_marked.pdf"]


def test_marked_names_are_numbered_for_several_files():
    names = file_rules.marked_display_names("Budget", [pdf(), xlsx(), docx()])
    assert names == ["Budget_marked-1.pdf", "Budget_marked-2.xlsx", "Budget_marked-3.docx"]


def test_read_uploads_skips_empty_placeholder_parts():
    """
    GIVEN: a multipart body with one real file and one empty, unnamed part
    WHEN:  the parts are read
    THEN:  only the real file is kept, with its content and type
    """
    real = MagicMock(filename="answer.docx", content_type=file_rules.DOCX_MIME, file=io.BytesIO(b"abc"))
    placeholder = MagicMock(filename="", content_type="application/octet-stream", file=io.BytesIO(b""))

    files = file_rules.read_uploads([real, placeholder])

    assert len(files) == 1
    assert files[0].filename == "answer.docx"
    assert files[0].content == b"abc"
    assert files[0].size == 3


def test_read_uploads_stops_one_byte_past_the_limit(mocker):
    mocker.patch.object(file_rules, "settings", MagicMock(max_upload_bytes=4))
    upload = MagicMock(filename="big.docx", content_type=file_rules.DOCX_MIME, file=io.BytesIO(b"x" * 100))

    files = file_rules.read_uploads([upload])

    assert files[0].size == 5


@pytest.mark.parametrize("identity", ["../student-1", "a/b", "..", "", "dir\\name"])
def test_blob_path_segment_refuses_ids_that_change_the_path(identity):
    with pytest.raises(ValidationFailed):
        file_rules.blob_path_segment(identity)


def test_blob_path_segment_keeps_provider_ids():
    assert file_rules.blob_path_segment("auth0|65f1c2e9") == "auth0|65f1c2e9"
    assert file_rules.blob_path_segment("3f0c9a52-1d7e-4b8a-9c1f-0e2d4a6b8c10") == "3f0c9a52-1d7e-4b8a-9c1f-0e2d4a6b8c10"
