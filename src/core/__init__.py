"""
Core object gateway logic.

This module is framework-agnostic - it doesn't import FastAPI or boto3.
Upload normalization, MIME inference and download selection can be tested
in isolation with an in-memory object store.
"""
