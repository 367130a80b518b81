"""
hireflow - resume ingestion and screening-webhook relay.

Uploads resumes to object storage, forwards them to an external
screening workflow and persists the returned analysis as candidates.
"""

__app_name__ = "hireflow"
__version__ = "0.1.0"
