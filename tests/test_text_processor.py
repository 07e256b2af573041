from wordcrawl.analysis import (
    WordFrequency, analyze, clean_text, tokenize, filter_stopwords,
    count_word_frequency, get_top_words, default_stopwords
)


def test_clean_text_removes_urls_emails_and_symbols():
    text = "Visit HTTPS://Example.com/path?x=1 or mail Bob@Example.com -- Hello, World! 2024"
    assert clean_text(text) == "visit or mail hello world"


def test_clean_text_keeps_cjk_and_collapses_whitespace():
    assert clean_text("  数据\t\n分析 ,  Data  ") == "数据 分析 data"


def test_clean_text_blank_input():
    assert clean_text("   \n\t ") == ""


def test_tokenize_latin_before_cjk():
    assert tokenize("数据 python 分析 a go") == ["python", "go", "数", "据", "分", "析"]


def test_tokenize_skips_single_latin_letters():
    assert tokenize("a b c dd") == ["dd"]


def test_filter_stopwords_drops_stopwords_and_short_tokens():
    tokens = ["The", "python", "apply", "数", "x", "Crawler"]
    assert filter_stopwords(tokens) == ["python", "Crawler"]


def test_filter_stopwords_with_custom_set():
    assert filter_stopwords(["alpha", "beta", "the"], stopwords={"alpha"}) == ["beta", "the"]


def test_count_word_frequency_is_case_insensitive_and_first_seen_ordered():
    frequency = count_word_frequency(["Beta", "alpha", "beta", "ALPHA", "beta"])
    assert frequency == {"beta": 3, "alpha": 2}
    assert list(frequency) == ["beta", "alpha"]


def test_analyze_ranks_and_applies_floor():
    result = analyze(["alpha alpha beta beta beta gamma"], 10, 2)
    assert result == [WordFrequency("beta", 3), WordFrequency("alpha", 2)]


def test_analyze_domain_noise_is_all_stopwords():
    assert analyze(["Remote web3 jobs remote jobs apply apply apply"], 10, 2) == []


def test_analyze_empty_inputs():
    assert analyze([], 100, 2) == []
    assert analyze(["   "], 100, 2) == []
    assert analyze(["", ""], 100, 2) == []


def test_analyze_counts_across_documents():
    result = analyze(["python crawler", "python parser", "crawler"], 10, 2)
    assert [w.to_dict() for w in result] == [
        {"text": "python", "value": 2},
        {"text": "crawler", "value": 2},
    ]


def test_analyze_documents_joined_with_space():
    # Without a separator "data" + "base" would merge into one token
    assert analyze(["data", "base data base"], 10, 2) == [
        WordFrequency("data", 2), WordFrequency("base", 2)
    ]


def test_analyze_ties_keep_first_seen_order():
    result = analyze(["delta gamma delta gamma omega omega"], 10, 1)
    assert [w.text for w in result] == ["delta", "gamma", "omega"]


def test_analyze_top_n_truncates():
    text = " ".join(["red"] * 5 + ["green"] * 4 + ["blue"] * 3)
    assert [w.text for w in analyze([text], 2, 1)] == ["red", "green"]


def test_analyze_non_positive_min_frequency_means_no_floor():
    assert [w.text for w in analyze(["solo python python"], 10, 0)] == ["python", "solo"]
    assert [w.text for w in analyze(["solo"], 10, -3)] == ["solo"]


def test_analyze_non_positive_top_n_is_empty():
    assert analyze(["python python"], 0, 1) == []


def test_cjk_characters_never_survive_length_filter():
    assert analyze(["数据数据数据 分析分析"], 10, 1) == []


def test_result_properties_hold():
    text = ("Crawlers crawl pages. Pages have words and the words repeat; "
            "crawlers count words in pages and the pages rank words. "
            "Contact us at info@example.com or https://example.com/about")
    stopwords = default_stopwords()
    result = get_top_words(text, top_n=3, min_frequency=2)

    assert len(result) <= 3
    assert all(word.value >= 2 for word in result)
    assert all(a.value >= b.value for a, b in zip(result, result[1:]))
    assert all(word.text.lower() not in stopwords for word in result)
    assert len({word.text for word in result}) == len(result)
