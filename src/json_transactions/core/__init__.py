"""Core types and exceptions shared by every transaction."""
