[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fusionlink"
version = "0.1.0"
description = "System Fusion (YSF) protocol toolkit: payload coding, FICH fields, DTMF, GPS, APRS and reflector networking"
requires-python = ">=3.10"
dependencies = []
keywords = ["ysf", "system-fusion", "c4fm", "ham-radio", "aprs", "reflector", "viterbi", "dtmf"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fusionlink"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
