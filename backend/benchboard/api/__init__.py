"""HTTP routers for BenchBoard."""
