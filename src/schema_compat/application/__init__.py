"""Application layer – compatibility use cases built on the kernel."""
