"""Core del motor de ciclos de envío (sin I/O)."""
