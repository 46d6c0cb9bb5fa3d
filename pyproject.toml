[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "processctrl"
version = "0.1.0"
description = "Start, stream, pause, resume and stop external processes from Python."
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["process", "subprocess", "signals", "pause", "resume", "streaming"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
processctrl-example = "processctrl.example:main"

[tool.hatch.build.targets.wheel]
packages = ["processctrl"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
