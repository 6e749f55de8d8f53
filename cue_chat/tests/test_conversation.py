from cue_chat.domain.conversation import ConversationHistory, Transcript
from cue_chat.domain.models import ChatMessage


def test_stage_turn_does_not_mutate_history():
    history = ConversationHistory()
    staged = history.stage_turn("sys", "hi")
    assert [m.role for m in staged] == ["system", "user"]
    assert len(history) == 0


def test_commit_turn_appends_assistant():
    history = ConversationHistory()
    history.commit_turn(history.stage_turn("sys", "hi"), "hello")
    staged = history.stage_turn("sys", "again")
    assert [m.role for m in staged] == ["system", "user", "assistant", "user"]
    assert history.messages[-1] == ChatMessage(role="assistant", content="hello")


def test_blank_system_prompt_is_not_inserted():
    history = ConversationHistory()
    assert [m.role for m in history.stage_turn("  ", "hi")] == ["user"]
    assert [m.role for m in history.stage_turn(None, "hi")] == ["user"]


def test_transcript_drops_oldest():
    transcript = Transcript(max_messages=2)
    transcript.add("a", "user")
    transcript.add("b", "bot")
    transcript.add("c", "user")
    assert [e.text for e in transcript.entries] == ["b", "c"]
    transcript.clear()
    assert len(transcript) == 0
