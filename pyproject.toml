[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rolegate"
version = "0.1.0"
description = "Role-based access control building blocks: role graphs, policy models, file adapters and watchers"
requires-python = ">=3.10"
dependencies = []
keywords = ["rbac", "access-control", "authorization", "policy", "roles"]
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
    "Topic :: Security",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rolegate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
