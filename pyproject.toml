[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flagkit"
version = "0.1.0"
description = "Feature-flag data model: users, segments, versioned items and a caching feature store wrapper"
requires-python = ">=3.11"
dependencies = []
keywords = ["feature flags", "feature toggles", "segments", "feature store", "caching"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["flagkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
