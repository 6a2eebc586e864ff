[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kelora"
version = "0.1.1"
description = "A fast, extensible log parser"
requires-python = ">=3.10"
keywords = ["logging", "parser", "cli", "logfmt", "json", "jsonl", "syslog"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Log Analysis",
    "Topic :: System :: Logging",
    "Topic :: Utilities",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
kelora = "kelora.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kelora"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
