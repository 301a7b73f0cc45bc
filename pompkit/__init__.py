"""Building blocks for partially observed Markov process models: distributions, model description, initial states, measurements, skeletons and synthetic likelihood."""

__version__ = "0.1.0"