import pytest

from zhaddons.profile import PunctuationMapEntry, PunctuationProfile, lang_by_path

LINES = [
    ". 。",
    '" “ ”',
    "# ＃",
    "",
    "   ",
]


@pytest.fixture
def profile():
    p = PunctuationProfile()
    p.load(LINES)
    return p


def test_get_punctuation(profile):
    assert profile.get_punctuation(".") == ("。", "")
    assert profile.get_punctuation('"') == ("“", "”")
    assert profile.get_punctuation(ord(".")) == ("。", "")


def test_hash_is_not_a_comment(profile):
    assert profile.get_punctuation("#") == ("＃", "")


def test_missing_key(profile):
    assert profile.get_punctuation("?") == ("", "")


def test_malformed_lines_skipped():
    p = PunctuationProfile()
    p.load(["ab c", "x", "a b c d", ", ，"])
    assert p.entries == [PunctuationMapEntry(",", "，")]


def test_whitespace_trimmed_and_ideographic_space_kept():
    p = PunctuationProfile()
    p.load(["  ,\t\u3000 \r"])
    assert p.get_punctuation(",") == ("\u3000", "")


def test_first_entry_wins():
    p = PunctuationProfile()
    p.load([". 。", ". ．"])
    assert p.get_punctuation(".") == ("。", "")
    assert len(p.entries) == 1


def test_load_replaces(profile):
    profile.load([", ，"])
    assert profile.get_punctuation(".") == ("", "")
    assert [e.key for e in profile.entries] == [","]


def test_dump_round_trip(profile):
    other = PunctuationProfile()
    other.load(profile.dump().splitlines())
    assert other.entries == profile.entries


def test_dump_format(profile):
    assert profile.dump().splitlines()[1] == '" “ ”'


def test_save_round_trip(profile, tmp_path):
    path = tmp_path / "punctuation" / "punc.mb.zh_CN"
    profile.save(path)
    other = PunctuationProfile()
    other.load(path.read_text(encoding="utf-8").splitlines())
    assert other.entries == profile.entries


def test_load_system_sets_defaults():
    p = PunctuationProfile()
    p.load_system(LINES)
    defaults = list(p.entries)
    p.load([", ，"])
    assert p.default_entries == defaults
    assert p.entries != p.default_entries


def test_reset_default_value(profile):
    profile.load_system(LINES)
    profile.reset_default_value()
    assert profile.default_entries == []
    assert profile.entries == []


def test_set_skips_invalid_and_duplicates():
    p = PunctuationProfile()
    p.set(
        [
            PunctuationMapEntry(".", "。"),
            PunctuationMapEntry("", "x"),
            PunctuationMapEntry(",", ""),
            PunctuationMapEntry("ab", "x"),
            PunctuationMapEntry(".", "．"),
            PunctuationMapEntry("'", "‘", "’"),
        ]
    )
    assert [e.key for e in p.entries] == [".", "'"]
    assert p.get_punctuation("'") == ("‘", "’")
    assert p.get_punctuation(".") == ("。", "")


def test_lang_by_path():
    assert lang_by_path("punctuationmap/zh_CN") == "zh_CN"
    assert lang_by_path("other/zh_CN") == ""