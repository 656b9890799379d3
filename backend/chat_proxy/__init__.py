"""Chat backend proxying prompts to a local Ollama server."""

__version__ = "1.0.0"
