"""Pipelines for text summarization and patient-caregiver matching.

Each step is a plain function so it can be called on its own and tested
without a database or a real embedding model.
"""
