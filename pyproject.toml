[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "deftree"
version = "0.1.0"
description = "Build a documented definition tree of a protobuf service from a CodeGeneratorRequest"
requires-python = ">=3.10"
keywords = ["protobuf", "grpc", "code generation", "documentation", "http bindings"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
]
dependencies = [
    "protobuf",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["deftree"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
