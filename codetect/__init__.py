"""Code chunking, Ollama and OpenAI-compatible embedding clients, SQLite embedding storage, semantic search and store migration."""

__version__ = "0.1.0"