"""Prompt templates sent to the language model."""
