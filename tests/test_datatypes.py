from keyword_sieve.datatypes import Keywords


def test_len_is_shorter_sequence():
    assert len(Keywords(tokens=["a", "b"], rankings=[0.1])) == 1
    assert len(Keywords()) == 0


def test_rank_map():
    keywords = Keywords(tokens=["low", "high"], rankings=[0.2, 0.8])
    assert keywords.rank_map() == {"low": 0.2, "high": 0.8}


def test_rank_map_ignores_unpaired_entries():
    keywords = Keywords(tokens=["a", "b", "c"], rankings=[0.1, 0.9])
    assert keywords.rank_map() == {"a": 0.1, "b": 0.9}


def test_top_is_highest_first():
    keywords = Keywords(tokens=["a", "b", "c"], rankings=[0.1, 0.3, 0.6])
    assert keywords.top(2) == [("c", 0.6), ("b", 0.3)]
    assert keywords.top(10) == [("c", 0.6), ("b", 0.3), ("a", 0.1)]
    assert keywords.top(0) == []
