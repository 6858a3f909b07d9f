[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cw20ics20"
version = "0.1.0"
description = "ICS20 token transfer contract logic: send cw20 and native tokens over IBC channels and track channel balances"
requires-python = ">=3.10"
dependencies = []
keywords = ["ibc", "ics20", "cw20", "token", "transfer", "smart-contract"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cw20ics20"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
