"""Core types and exceptions for the stepflow pipeline."""
