"""Administrative API over a Chroma vector database."""

__version__ = "0.1.0"
