"""Core library: configuration, sidecar supervision and the HTTP client."""
