import pytest

from wordcrawl.analysis import load_stopwords, default_stopwords


def test_default_stopwords_cover_both_languages():
    stopwords = default_stopwords()
    assert {"the", "remote", "jobs", "apply", "on"} <= stopwords
    assert {"的", "我们", "招聘"} <= stopwords


def test_default_stopwords_are_cached():
    assert default_stopwords() is default_stopwords()


def test_load_stopwords_from_file_with_extra(tmp_path):
    path = tmp_path / "words.yaml"
    path.write_text("custom:\n  - Foo\n  - ' bar '\n", encoding="utf-8")

    stopwords = load_stopwords(str(path), extra=["Baz"])
    assert stopwords == frozenset({"foo", "bar", "baz"})


def test_load_stopwords_accepts_plain_list(tmp_path):
    path = tmp_path / "words.yaml"
    path.write_text("- alpha\n- beta\n", encoding="utf-8")
    assert load_stopwords(str(path)) == frozenset({"alpha", "beta"})


def test_load_stopwords_extends_bundled_lists():
    stopwords = load_stopwords(extra=["python"])
    assert "python" in stopwords
    assert "the" in stopwords


def test_load_stopwords_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_stopwords(str(tmp_path / "missing.yaml"))


def test_load_stopwords_rejects_non_string_entries(tmp_path):
    path = tmp_path / "words.yaml"
    path.write_text("english:\n  - yes\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_stopwords(str(path))
