[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zeroplug"
version = "0.1.0"
description = "Chat-bot plugin toolkit: group reminders, group administration helpers, MIDI composition, holiday countdowns and assorted lookup services"
requires-python = ">=3.10"
keywords = [
    "chatbot",
    "cq-code",
    "group-management",
    "reminder",
    "cron",
    "midi",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Natural Language :: Chinese (Simplified)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
    "Topic :: Multimedia :: Sound/Audio :: MIDI",
    "Typing :: Typed",
]
dependencies = [
    "requests",
    "lxml",
    "mido",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["zeroplug"]

[tool.hatch.build.targets.sdist]
include = [
    "zeroplug",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
