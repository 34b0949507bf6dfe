"""repo2ctx - assemble a directory's files into one LLM-ready context document."""

__version__ = "0.1.0"
