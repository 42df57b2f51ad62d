"""Request, response, streaming, multipart and batch types for LLM HTTP APIs."""

__version__ = "0.1.0"