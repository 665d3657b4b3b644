[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cookshelf"
version = "0.1.0"
description = "Index cooklang recipe folders, find recipe images and render recipe models as cooklang or Markdown"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["cooklang", "recipes", "markdown", "cooking", "index"]
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
    "Topic :: Text Processing :: Markup",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["cookshelf"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
