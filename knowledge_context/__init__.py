"""Knowledge retrieval and context-assembly pipeline."""

__version__ = "0.1.0"
