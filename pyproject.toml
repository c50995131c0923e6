[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "loxwalk"
version = "0.1.0"
description = "A tree-walking interpreter for the Lox scripting language"
requires-python = ">=3.10"
dependencies = []
keywords = ["lox", "interpreter", "tree-walking", "scripting", "language"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
loxwalk = "loxwalk.lox:main"

[tool.hatch.build.targets.wheel]
packages = ["loxwalk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
