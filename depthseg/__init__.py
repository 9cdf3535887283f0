"""Ground removal and angle-based clustering of range images, with a small publish/subscribe layer."""

__version__ = "0.1.0"