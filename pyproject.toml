[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zhaddons"
version = "0.1.0"
description = "Chinese input helpers: simplified/traditional conversion, full-width text, punctuation mapping, pinyin and stroke lookup, cloud pinyin and .scel dictionary conversion"
requires-python = ">=3.10"
dependencies = []
keywords = ["chinese", "pinyin", "stroke", "punctuation", "fullwidth", "scel", "input method"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Natural Language :: Chinese (Simplified)",
    "Natural Language :: Chinese (Traditional)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Linguistic",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
scel2org = "zhaddons.scel:main"

[tool.hatch.build.targets.wheel]
packages = ["zhaddons"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
