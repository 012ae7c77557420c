"""BenchBoard: bench resource tracking and RRF candidate matching."""

__version__ = "1.0.0"
