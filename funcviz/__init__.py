"""funcviz: evaluate, sample and plot user-defined mathematical functions."""

__version__ = "0.1.0"
