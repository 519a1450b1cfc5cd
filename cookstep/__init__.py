"""cookstep: recipe extraction and step-by-step cooking guide backend."""

__version__ = "1.0.0"
