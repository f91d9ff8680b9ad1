"""Chinese input helpers: script conversion, full-width text, punctuation, pinyin, stroke and cloud lookup, .scel reading."""

__version__ = "0.1.0"