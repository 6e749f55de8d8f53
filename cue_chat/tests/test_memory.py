from cue_chat.domain.memory import QuestionMemory


def test_repeat_detection_is_case_and_space_insensitive():
    memory = QuestionMemory()
    assert memory.accept("Hello") is False
    assert memory.accept("hello") is True
    assert memory.accept("  HELLO ") is True
    assert len(memory) == 1


def test_distinct_questions_grow_memory():
    memory = QuestionMemory()
    for q in ["a", "b", "c"]:
        assert not memory.accept(q)
    assert len(memory) == 3
    assert "B" in memory
