"""Run chains and Python-side model helpers for spiking neural network example projects."""

__version__ = "0.1.0"