# zhaddons

Building blocks for Chinese text input, in plain Python with no third-party dependencies.

- `zhaddons.conversion`: `NativeBackend` converts between Simplified and Traditional Chinese one character at a time, from a table with one pair per line (the simplified character, then the traditional one). `convert_chars` applies any character mapping to a string.
- `zhaddons.chttrans`: `Chttrans` keeps the set of input methods (`InputMethodEntry`) whose output is converted, toggles them, and converts committed text (`filter_commit`) or formatted segments with a cursor (`filter_output`).
- `zhaddons.fullwidth`: `to_fullwidth` and `fullwidth_for_key` turn ASCII text and key symbols into full-width forms; `Fullwidth` holds the on/off state.
- `zhaddons.profile` and `zhaddons.punctuation`: `PunctuationProfile` maps punctuation to its Chinese form for one language; `Punctuation` loads `punc.mb.<lang>` profiles from a system and a user directory, alternates paired marks between opening and closing forms, and can keep `.` and `,` half width after a Latin letter or digit.
- `zhaddons.pinyinlookup`, `zhaddons.stroke` and `zhaddons.pinyinhelper`: pinyin readings of a character from a binary table, fuzzy lookup of characters by stroke sequence (digits `12345`, or the letters `hspnz` through `PinyinHelper.lookup_stroke`), and `pretty_string` to show a stroke sequence as stroke glyphs.
- `zhaddons.cloudpinyin`, `zhaddons.fetch` and `zhaddons.lrucache`: ask an online pinyin service (Google, Google CN or Baidu) for a conversion in background threads, with an LRU result cache and a limit on errors.
- `zhaddons.scel`: read `.scel` cell dictionaries (`parse_scel`, `read_scel`) and the `scel2org` command.

## Installing

```
pip install .
```

## Converting a .scel dictionary

```
scel2org words.scel -o words.txt
```

The output has one line per entry, in the form `word<TAB>pin'yin<TAB>0`. Without `-o`, or with `-o -`, the output goes to standard output. The dictionary's descriptions are printed to standard error. `-d` also prints the words of the deletion table to standard error, and `-h` shows the usage text.

## Examples

```python
from zhaddons.fullwidth import to_fullwidth
from zhaddons.stroke import pretty_string
from zhaddons.lrucache import LRUCache

to_fullwidth("abc 123")        # 'ａｂｃ １２３' (the space is kept)
pretty_string("12345")         # '一丨丿㇏𠃍'

cache = LRUCache(2)
cache.insert("ni", "你")
cache.find("ni")               # '你'
```

```python
from zhaddons.conversion import NativeBackend

backend = NativeBackend("gbks2t.tab")
if backend.load(None):
    print(backend.convert_simp_to_trad("汉字"))
```

```python
from zhaddons.stroke import Stroke

stroke = Stroke()
stroke.load_lines(["1 一", "12 十"])
stroke.lookup("12", 5)         # list of (character, strokes) pairs, closest first
stroke.reverse_lookup("十")    # '12'
```

## What this package does not do

- It ships no data files. The conversion table, the pinyin reading table and the stroke table must be supplied as paths; without them the lookups return their inputs unchanged or empty results.
- It does not hook into any input method framework. Key events, commits and surrounding text must be passed in by the caller; there are no notifications, status menus or hotkey handling beyond the configured key names.
- `ChttransEngine.OPENCC` can be configured, but no backend for it is provided; conversion then falls back to the native table backend if one is registered.

## Running the tests

```
pip install .[test]
pytest
```