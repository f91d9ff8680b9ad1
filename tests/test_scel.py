import struct

import pytest

from zhaddons.scel import (
    ScelEntry,
    ScelFormatError,
    decode_utf16,
    format_entry,
    main,
    parse_scel,
    read_scel,
)

HEADER = b"\x40\x15\x00\x00\x44\x43\x53\x01\x01\x00\x00\x00"
PINYIN_MAGIC = b"\x9d\x01\x00\x00"
DELTBL_MAGIC = b"\x4c\x00\x54\x00\x42\x00\x4c\x00"


def u16(value):
    return struct.pack("<H", value)


def field_bytes(text, size):
    raw = text.encode("utf-16-le")
    return raw + b"\x00" * (size - len(raw))


def build(pinyins, groups, deletions=None, desc="d", ldesc="l", nxt="n"):
    data = bytearray(HEADER)
    data += b"\x00" * (0x130 - len(data))
    data += field_bytes(desc, 0x338 - 0x130)
    data += field_bytes(ldesc, 0x540 - 0x338)
    data += field_bytes(nxt, 0x1540 - 0x540)
    data += PINYIN_MAGIC
    for i, py in enumerate(pinyins):
        raw = py.encode("utf-16-le")
        data += u16(i) + u16(len(raw)) + raw
    for indices, words in groups:
        data += u16(len(words)) + u16(2 * len(indices))
        for index in indices:
            data += u16(index)
        for word in words:
            raw = word.encode("utf-16-le")
            data += u16(len(raw)) + raw
            data += u16(10) + b"\x00" * 10
    if deletions is not None:
        data += u16(0x44) + u16(0x45) + DELTBL_MAGIC
        data += u16(len(deletions))
        for word in deletions:
            raw = word.encode("utf-16-le")
            data += u16(len(raw) // 2) + raw
    return bytes(data)


PINYINS = ["a", "ni", "hao", "lue", "zuo"]


def test_decode_utf16_stops_at_nul():
    assert decode_utf16("你好".encode("utf-16-le") + b"\x00\x00xx") == "你好"


def test_decode_utf16_odd_length():
    with pytest.raises(ScelFormatError):
        decode_utf16(b"abc")


def test_parse_descriptions_and_pinyins():
    result = parse_scel(build(PINYINS, [], desc="词库", ldesc="长", nxt="例"))
    assert result.description == "词库"
    assert result.long_description == "长"
    assert result.extra_description == "例"
    assert result.pinyins == ["a", "ni", "hao", "lve", "zuo"]
    assert result.entries == []


def test_parse_entries():
    data = build(PINYINS, [([1, 2], ["你好", "拟好"]), ([4], ["做"])])
    result = parse_scel(data)
    assert result.entries == [
        ScelEntry("你好", ("ni", "hao")),
        ScelEntry("拟好", ("ni", "hao")),
        ScelEntry("做", ("zuo",)),
    ]
    assert result.deleted == []


def test_parse_deletions():
    data = build(PINYINS, [([1], ["你"])], deletions=["删除", "词"])
    result = parse_scel(data)
    assert result.deleted == ["删除", "词"]
    assert [e.text for e in result.entries] == ["你"]


def test_bad_header():
    data = b"\x00" * 12 + build(PINYINS, [])[12:]
    with pytest.raises(ScelFormatError):
        parse_scel(data)


def test_truncated_description():
    with pytest.raises(ScelFormatError):
        parse_scel(HEADER + b"\x00" * 0x200)


def test_invalid_pinyin_index():
    data = build(PINYINS, [([9], ["错"])])
    with pytest.raises(ScelFormatError):
        parse_scel(data)


def test_truncated_text_raises():
    data = build(PINYINS, [([1], ["你好"])])
    cut = data.index("你好".encode("utf-16-le")) + 1
    with pytest.raises(ScelFormatError):
        parse_scel(data[:cut])


def test_format_entry():
    assert format_entry(ScelEntry("你好", ("ni", "hao"))) == "你好\tni'hao\t0"


def test_read_scel_from_file(tmp_path):
    path = tmp_path / "dict.scel"
    path.write_bytes(build(PINYINS, [([2], ["好"])]))
    assert read_scel(path).entries == [ScelEntry("好", ("hao",))]


def test_main_writes_output(tmp_path, capsys):
    source = tmp_path / "dict.scel"
    source.write_bytes(build(PINYINS, [([1, 2], ["你好"])], deletions=["旧"]))
    target = tmp_path / "out.txt"
    assert main(["-d", "-o", str(target), str(source)]) == 0
    assert target.read_text(encoding="utf-8") == "你好\tni'hao\t0\n"
    assert "DEL:旧" in capsys.readouterr().err


def test_main_usage_and_missing_file(tmp_path, capsys):
    assert main(["-h"]) == 1
    assert "usage" in capsys.readouterr().out
    assert main([]) == 1
    assert main([str(tmp_path / "missing.scel")]) == 1
    assert "Cannot open file" in capsys.readouterr().err