"""Definition trees for protobuf service definitions, with comments and HTTP parameters."""

__version__ = "0.1.0"