"""
API routes package for TreeDiff.
"""
from api.routes import comparison

__all__ = ["comparison"]
