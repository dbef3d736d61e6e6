"""Tests for the chapter list file."""

from mangapdf.chapter_list import load_chapter_list, save_chapter_list


def test_load_ignores_blank_lines_and_whitespace(tmp_path):
    path = tmp_path / "chapters.txt"
    path.write_text(
        "https://example/title/x/ch_1\r\n\n   \nhttps://example/title/x/ch_2  \n",
        encoding="utf-8",
    )

    assert load_chapter_list(path) == [
        "https://example/title/x/ch_1",
        "https://example/title/x/ch_2",
    ]


def test_load_drops_duplicates_keeping_first(tmp_path):
    path = tmp_path / "chapters.txt"
    path.write_text("a/title/ch_2\na/title/ch_1\na/title/ch_2\n", encoding="utf-8")

    assert load_chapter_list(path) == ["a/title/ch_2", "a/title/ch_1"]


def test_save_writes_one_url_per_line(tmp_path):
    path = tmp_path / "nested" / "chapters.txt"

    save_chapter_list(path, ["u1", "u2", "u1"])

    assert path.read_text(encoding="utf-8") == "u1\nu2\n"


def test_save_empty_list(tmp_path):
    path = tmp_path / "chapters.txt"

    save_chapter_list(path, [])

    assert path.read_text(encoding="utf-8") == ""
    assert load_chapter_list(path) == []
