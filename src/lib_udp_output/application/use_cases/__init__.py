"""Use cases orchestrating the UDP output lifecycle."""
