"""archgen: architecture diagrams from source trees."""

__version__ = "1.0.0"
