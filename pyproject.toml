[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "seqtimeline"
version = "0.1.0"
description = "Timed sequences with transport, cues, frame snapping and timeline navigation logic"
requires-python = ">=3.10"
dependencies = []
keywords = ["timeline", "sequence", "playback", "cue", "transport", "snapping"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Editors",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["seqtimeline"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
