from uuid import uuid4


def generate_id(prefix: str = "") -> str:
    """Return a random hex identifier, optionally prefixed (``job-``, ``review-``)."""
    return f"{prefix}{uuid4().hex}"
