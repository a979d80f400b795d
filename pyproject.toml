[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zeightycore"
version = "0.1.0"
description = "A cycle-counting Z80 CPU core with register model, ALU helpers and calculator key codes"
requires-python = ">=3.10"
keywords = ["z80", "emulator", "cpu", "ti-calculator", "retrocomputing"]
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
    "Topic :: System :: Emulators",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["zeightycore"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
