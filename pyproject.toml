[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lspframework"
version = "0.1.0"
description = "Building blocks for Language Server Protocol servers: JSON, JSON-RPC, message framing and request dispatch"
requires-python = ">=3.10"
dependencies = []
keywords = ["lsp", "language-server", "json-rpc", "protocol"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lspframework"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
