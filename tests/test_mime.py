import pytest

from marlin.mime import CSS, HTML, JSON, MARKDOWN, FileRole, classify, lookup, role_for


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("about.en.md", MARKDOWN),
        ("data.json", JSON),
        ("LOGO.PNG", "image/png"),
        ("style.css", CSS),
        ("main.html", HTML),
        ("README", None),
        ("archive.zip", None),
    ],
)
def test_lookup_uses_final_extension(filename: str, expected: str | None) -> None:
    assert lookup(filename) == expected


def test_classify_buckets_files_by_role() -> None:
    assert classify("about.se.txt") is FileRole.CONTENT
    assert classify("site.css") is FileRole.STYLESHEET
    assert classify("photo.jpeg") is FileRole.IMAGE
    assert classify("icon.svg") is FileRole.IMAGE
    assert classify("app.js") is FileRole.SCRIPT
    assert classify("about.html") is FileRole.TEMPLATE
    assert classify("notes.xyz") is FileRole.UNKNOWN


def test_unlisted_image_types_are_still_images() -> None:
    assert role_for("image/tiff") is FileRole.IMAGE
    assert role_for("video/mp4") is FileRole.UNKNOWN
    assert role_for(None) is FileRole.UNKNOWN
