[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tickstream"
version = "0.1.0"
description = "Market trade stream client over secure WebSockets, with a raw feed reader, a threaded counter demo and a compiler identification helper"
requires-python = ">=3.10"
dependencies = [
    "websockets",
]
keywords = [
    "websocket",
    "market-data",
    "trades",
    "streaming",
    "asyncio",
    "compiler-identification",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
    "Topic :: Internet",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
tickstream-client = "tickstream.client:main"
tickstream-raw = "tickstream.rawfeed:main"
tickstream-counter = "tickstream.counter:main"
tickstream-compilerid = "tickstream.compilerid.info:main"

[tool.hatch.build.targets.wheel]
packages = ["tickstream"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
