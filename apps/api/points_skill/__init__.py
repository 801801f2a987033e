"""Family Points voice skill backend."""
