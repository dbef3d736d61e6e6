import pytest

from mangapdf.config import Settings


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a temp dir, with all waits collapsed to zero."""
    return Settings(
        chapter_list_path=tmp_path / "chapters.txt",
        images_dir=tmp_path / "chapters",
        pdf_dir=tmp_path / "pdf-output",
        log_dir=tmp_path / "logs",
        scroll_interval_s=0,
        scroll_settle_s=0,
        scroll_max_s=1,
        ready_timeout_s=0.1,
        retry_backoff_s=0,
    )
