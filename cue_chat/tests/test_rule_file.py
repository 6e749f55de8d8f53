import tempfile
from pathlib import Path

from cue_chat.domain.rules import load_rule_store
from cue_chat.infrastructure.storage.rule_file import FileRuleSource


def test_file_rule_source_reads_lines():
    with tempfile.TemporaryDirectory() as d:
        path = Path(d) / "rules.txt"
        path.write_text("[tennis]serve|Serve tips\nnot a rule\nfallback|Huh?\n", encoding="utf-8")
        source = FileRuleSource(path)
        lines = source.load_rule_lines()
        assert lines == ["[tennis]serve|Serve tips", "not a rule", "fallback|Huh?"]
        store = load_rule_store(lines)
        assert len(store) == 1
        assert store.fallback_response == "Huh?"


def test_missing_file_is_absent_source():
    with tempfile.TemporaryDirectory() as d:
        source = FileRuleSource(Path(d) / "missing.txt")
        assert source.load_rule_lines() is None
