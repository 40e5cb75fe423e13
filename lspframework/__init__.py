"""Language Server Protocol building blocks: JSON values, JSON-RPC messages, framed connections and request dispatch."""

__version__ = "0.1.0"