[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ysflink"
version = "0.1.0"
description = "System Fusion (YSF) frame coding, FCS/YSF reflector links, DTMF and GPS decoding, and APRS position reporting"
requires-python = ">=3.10"
dependencies = []
keywords = ["ysf", "system fusion", "c4fm", "fcs", "aprs", "reflector", "ham radio", "amateur radio"]
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
packages = ["ysflink"]

[tool.pytest.ini_options]
addopts = "-ra"
