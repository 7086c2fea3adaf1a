"""EryAI Monitor — health checks, status page and daily test suite."""
