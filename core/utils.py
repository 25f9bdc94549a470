# core/utils.py

"""
Small helpers shared by the models and services: identifiers and timestamps.
"""

import datetime
import uuid


def generate_uuid() -> str:
    """A new gradebook or assignment uid."""
    return str(uuid.uuid4())


def now() -> datetime.datetime:
    # local naive time, matching the timestamps the grade source stores
    return datetime.datetime.now()
