import os

# Headless matplotlib for the renderer / server tests
os.environ.setdefault("MPLBACKEND", "Agg")
