[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "olerip"
version = "0.2.1"
description = "Read OLE2 compound documents and unwrap the attachments embedded in their streams"
requires-python = ">=3.10"
dependencies = []
keywords = ["ole", "ole2", "compound-document", "attachments", "extraction", "email"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Email :: Filters",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["olerip"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
