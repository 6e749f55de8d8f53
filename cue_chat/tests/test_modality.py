from cue_chat.agents.modality import (
    AnimationConfig,
    AudioConfig,
    ModalitySelector,
    asset_group_key,
    group_assets_by_prefix,
)


class AnimatorStub:
    def __init__(self, triggers):
        self.triggers = set(triggers)
        self.fired = []

    def has_trigger(self, name):
        return name in self.triggers

    def fire_trigger(self, name):
        self.fired.append(name)


class PlayerStub:
    def __init__(self):
        self.played = []

    def play(self, handle):
        self.played.append(handle)


ALL_TRIGGERS = ["Greet", "Wave", "Success", "Think"]


def test_asset_group_key_uses_prefix_before_underscore():
    assert asset_group_key("serve_01.wav") == "serve"
    assert asset_group_key("Hello_a_b.ogg") == "hello"
    assert asset_group_key("fallback") == "fallback"


def test_group_assets_by_prefix():
    groups = group_assets_by_prefix(["serve_1.wav", "serve_2.wav", "fallback_1.wav"])
    assert groups == {"serve": ["serve_1.wav", "serve_2.wav"], "fallback": ["fallback_1.wav"]}


def test_audio_group_lookup_falls_back():
    audio = AudioConfig(groups={"serve": ["s1"], "fallback": ["f1"]})
    assert audio.group_for("serve") == "serve"
    assert audio.group_for("forehand") == "fallback"
    assert AudioConfig(groups={}).group_for("serve") is None


def test_trigger_categories():
    anim = AnimationConfig()
    assert anim.trigger_for("hello") == "Greet"
    assert anim.trigger_for("hey") == "Greet"
    assert anim.trigger_for("this") == "Greet"
    assert anim.trigger_for("bye") == "Wave"
    assert anim.trigger_for("thanks") == "Wave"
    assert anim.trigger_for("serve") == "Success"
    assert anim.trigger_for("fallback") == "Think"


def test_invalid_trigger_degrades_to_success():
    selector = ModalitySelector(animator=AnimatorStub(["Success"]))
    assert selector.select_trigger("hello") == "Success"
    assert selector.select_trigger("fallback") == "Success"
    assert ModalitySelector(animator=AnimatorStub([])).select_trigger("hello") is None


def test_apply_plays_audio_and_fires_trigger():
    player, animator = PlayerStub(), AnimatorStub(ALL_TRIGGERS)
    selector = ModalitySelector(
        audio=AudioConfig(groups={"hello": ["h1", "h2"], "fallback": ["f1"]}),
        player=player,
        animator=animator,
        pick=lambda clips: clips[-1],
    )

    cue = selector.apply("hello")
    assert (cue.audio_group, cue.audio, cue.trigger) == ("hello", "h2", "Greet")

    cue = selector.apply("fallback")
    assert (cue.audio_group, cue.audio, cue.trigger) == ("fallback", "f1", "Think")

    assert player.played == ["h2", "f1"]
    assert animator.fired == ["Greet", "Think"]


def test_apply_without_collaborators_is_silent():
    cue = ModalitySelector().apply("serve")
    assert cue.audio is None
    assert cue.trigger == "Success"


def test_use_audio_groups_replaces_lookup_table():
    player = PlayerStub()
    selector = ModalitySelector(player=player, pick=lambda clips: clips[-1])
    assert selector.apply("serve").audio is None

    selector.use_audio_groups(group_assets_by_prefix(["Serve_1.wav", "serve_2.wav", "fallback_1.wav"]))

    assert sorted(selector.audio.groups) == ["fallback", "serve"]
    assert selector.apply("serve").audio == "serve_2.wav"
    assert selector.apply("volley").audio_group == "fallback"
    assert player.played == ["serve_2.wav", "fallback_1.wav"]
