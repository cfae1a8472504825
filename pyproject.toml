[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pingone-tools"
version = "0.1.0"
description = "Tool definitions, tool collections and API client wrappers for managing PingOne applications and environments"
requires-python = ">=3.10"
dependencies = []
keywords = ["pingone", "identity", "tools", "applications", "environments", "oidc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pingone_tools"]

[tool.pytest.ini_options]
addopts = "-ra"
