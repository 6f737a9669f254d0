"""Backend package: config, DB models, repository, pipelines, APIs.

This package loads patients and eligible caregivers, scores them with the
matching pipeline, and serves the ranked results over HTTP.
"""
