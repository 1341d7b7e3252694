[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "videosgo"
version = "0.1.0"
description = "Video catalogue collection toolkit: MacCMS harvesting, play-link parsing, title de-duplication and m3u8 liveness probing"
requires-python = ">=3.10"
dependencies = [
    "requests",
    "psutil",
    "python-dotenv",
]
keywords = [
    "maccms",
    "m3u8",
    "video",
    "collector",
    "crawler",
    "deduplication",
    "title-matching",
]
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
    "Topic :: Internet :: WWW/HTTP :: Indexing/Search",
    "Topic :: Multimedia :: Video",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["videosgo"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
