[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "l25c"
version = "0.1.0"
description = "Compiler and stack-machine interpreter for the small L25 teaching language"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "interpreter", "p-code", "stack-machine", "l25", "education"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
    "Topic :: Software Development :: Interpreters",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
l25c = "l25c.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["l25c"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
