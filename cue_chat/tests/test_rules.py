from cue_chat.config.settings import DEFAULT_FALLBACK_RESPONSE
from cue_chat.domain.rules import RuleStore, default_rule_lines, load_rule_store, parse_keywords


def test_lines_without_separator_are_ignored():
    store = load_rule_store(["hello world", "fallback only text", ""])
    assert store.rules == ()
    assert store.fallback_response == DEFAULT_FALLBACK_RESPONSE


def test_keywords_are_normalized_and_tag_stripped():
    store = load_rule_store(["[greet] Hello , HI,,hey |  Hi there!  "])
    rule = store.rules[0]
    assert rule.keywords == ("hello", "hi", "hey")
    assert rule.response == "Hi there!"


def test_parse_keywords_strips_only_leading_tag():
    assert parse_keywords("[a]x,[b]y") == ("x", "[b]y")


def test_last_fallback_line_wins_and_is_not_a_rule():
    store = load_rule_store([
        "fallback|First",
        "[tennis]serve|Serve tips",
        "[misc]Fallback|Second",
    ])
    assert store.fallback_response == "Second"
    assert [r.keywords for r in store.rules] == [("serve",)]


def test_lines_missing_response_or_keywords_are_skipped():
    store = load_rule_store(["serve|", "|orphan response", "[tag]|x", "score|Scoring"])
    assert len(store) == 1
    assert store.rules[0].response == "Scoring"


def test_response_may_contain_separator():
    store = load_rule_store(["pipe|a | b"])
    assert store.rules[0].response == "a | b"


def test_absent_source_gives_empty_store_with_default_fallback():
    store = load_rule_store(None)
    assert store == RuleStore()
    assert store.fallback_response == DEFAULT_FALLBACK_RESPONSE


def test_order_is_preserved():
    store = load_rule_store(["a|R1", "b|R2", "c|R3"])
    assert [r.response for r in store.rules] == ["R1", "R2", "R3"]


def test_default_rule_lines_load_cleanly():
    store = load_rule_store(default_rule_lines())
    assert len(store) == 6
    assert store.rules[0].keywords == ("hello", "hi", "hey")
    assert "what can you do" in store.rules[-1].keywords
