"""Application layer: ports and use cases of the UDP output."""
