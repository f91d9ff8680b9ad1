import pytest

from zhaddons.profile import PunctuationMapEntry, PunctuationProfile
from zhaddons.punctuation import Punctuation, PunctuationConfig, PunctuationState

LINES = [". 。", ", ，", '" “ ”', "( （ ）"]


def make_profile(lines=LINES):
    profile = PunctuationProfile()
    profile.load_system(lines)
    return profile


@pytest.fixture
def punc():
    return Punctuation(PunctuationConfig(), {"zh_CN": make_profile()})


def test_get_punctuation(punc):
    assert punc.get_punctuation("zh_CN", ".") == ("。", "")
    assert punc.get_punctuation("zh_CN", ord('"')) == ("“", "”")
    assert punc.get_punctuation("en", ".") == ("", "")


def test_get_punctuation_disabled(punc):
    assert punc.set_enabled(False) is True
    assert punc.get_punctuation("zh_CN", ".") == ("", "")
    assert punc.set_enabled(False) is False


def test_push_alternates_pairs(punc):
    state = PunctuationState()
    assert punc.push_punctuation("zh_CN", state, '"') == "“"
    assert state.last_punc_stack == {'"': "“"}
    assert punc.push_punctuation("zh_CN", state, '"') == "”"
    assert state.last_punc_stack == {}
    assert punc.push_punctuation("zh_CN", state, ".") == "。"


def test_push_unknown_language(punc):
    assert punc.push_punctuation("ja", PunctuationState(), ".") == ""


def test_half_width_after_latin_and_cancel(punc):
    state = PunctuationState()
    punc.on_commit(state, "abc1")
    assert state.last_is_eng_or_digit == "1"
    assert punc.push_punctuation("zh_CN", state, ".") == ""
    assert state.not_converted == "."
    assert punc.cancel_last("zh_CN", state) == "。"
    assert state.not_converted == ""
    assert punc.cancel_last("zh_CN", state) == ""


def test_half_width_option_off():
    punc = Punctuation(
        PunctuationConfig(half_width_punc_after_latin_or_number=False),
        {"zh_CN": make_profile()},
    )
    state = PunctuationState(last_is_eng_or_digit="a")
    assert punc.push_punctuation("zh_CN", state, ",") == "，"


def test_push_v2(punc):
    state = PunctuationState()
    assert punc.push_punctuation_v2("zh_CN", state, "(") == ("（", "")
    assert punc.push_punctuation_v2("zh_CN", state, "(") == ("）", "")
    assert punc.push_punctuation_v2("zh_CN", state, ".") == ("。", "")


def test_push_v2_together():
    punc = Punctuation(
        PunctuationConfig(type_paired_punctuation_together=True),
        {"zh_CN": make_profile()},
    )
    state = PunctuationState()
    assert punc.push_punctuation_v2("zh_CN", state, '"') == ("“", "”")
    assert state.last_punc_stack == {}


def test_on_commit_non_ascii(punc):
    state = PunctuationState(last_is_eng_or_digit="a")
    punc.on_commit(state, "你好")
    assert state.last_is_eng_or_digit == ""


def test_on_key(punc):
    state = PunctuationState()
    punc.on_key(state, "Z", accepted=False, is_release=False)
    assert state.last_is_eng_or_digit == "Z"
    punc.on_key(state, None, accepted=True, is_release=False)
    assert state.last_is_eng_or_digit == "Z"
    punc.on_key(state, "!", accepted=False, is_release=False)
    assert state.last_is_eng_or_digit == ""


def test_reset_and_rebuild_stack(punc):
    state = PunctuationState()
    punc.push_punctuation("zh_CN", state, '"')
    punc.on_reset(state, True)
    assert state.last_punc_stack == {}
    assert state.may_rebuild_from_surrounding_text is True
    punc.on_surrounding_text(state, "a“b", 3, True)
    assert state.last_punc_stack == {'"': "“"}
    assert state.last_punc_stack_backup == {}


def test_rebuild_not_converted(punc):
    state = PunctuationState(not_converted=".")
    punc.on_reset(state, True)
    assert state.not_converted == ""
    punc.on_surrounding_text(state, "ab.", 3, True)
    assert state.not_converted == "."
    assert punc.cancel_last("zh_CN", state) == "。"


def test_surrounding_without_rebuild_clears_backup(punc):
    state = PunctuationState(
        not_converted_backup=".", last_punc_stack_backup={'"': "“"}
    )
    punc.on_surrounding_text(state, "x“.", 3, True)
    assert state.not_converted_backup == ""
    assert state.last_punc_stack_backup == {}
    assert state.last_punc_stack == {}


def test_focus_in(punc):
    state = PunctuationState()
    punc.on_focus_in(state, False)
    assert state.may_rebuild_from_surrounding_text is False
    punc.on_focus_in(state, True)
    assert state.may_rebuild_from_surrounding_text is True


def test_load_profiles(tmp_path):
    system = tmp_path / "system"
    user = tmp_path / "user"
    system.mkdir()
    user.mkdir()
    (system / "punc.mb.zh_CN").write_text(". 。\n, ，\n", encoding="utf-8")
    (system / "punc.mb.zh_TW").write_text(". 。\n", encoding="utf-8")
    (user / "punc.mb.zh_CN").write_text(". ．\n", encoding="utf-8")
    punc = Punctuation(profiles={"old": make_profile()})
    punc.load_profiles(system, user)
    assert set(punc.profiles) == {"zh_CN", "zh_TW"}
    assert punc.get_punctuation("zh_CN", ".") == ("．", "")
    assert punc.get_punctuation("zh_CN", ",") == ("", "")
    assert punc.get_punctuation("zh_TW", ".") == ("。", "")


def test_sub_config_round_trip(tmp_path):
    system = tmp_path / "system"
    user = tmp_path / "user"
    system.mkdir()
    (system / "punc.mb.zh_CN").write_text(". 。\n", encoding="utf-8")
    punc = Punctuation()
    punc.load_profiles(system, user)
    assert punc.get_sub_config("punctuationmap/zh_CN") == [
        PunctuationMapEntry(".", "。", "")
    ]
    assert punc.get_sub_config("other/zh_CN") is None
    assert punc.get_sub_config("punctuationmap/xx") is None
    punc.set_sub_config(
        "punctuationmap/zh_CN", [PunctuationMapEntry("!", "！", "")]
    )
    assert punc.get_punctuation("zh_CN", "!") == ("！", "")
    saved = (user / "punc.mb.zh_CN").read_text(encoding="utf-8")
    assert saved == "! ！\n"
    reloaded = Punctuation()
    reloaded.load_profiles(system, user)
    assert reloaded.get_punctuation("zh_CN", "!") == ("！", "")


def test_status(punc):
    assert punc.status_icon() == "fcitx-punc-active"
    assert punc.status_text() == "Full width punctuation"
    punc.set_enabled(False)
    assert punc.status_icon() == "fcitx-punc-inactive"
    assert punc.status_text() == "Half width punctuation"