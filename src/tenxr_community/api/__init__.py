"""HTTP API for the 10xR community platform."""
