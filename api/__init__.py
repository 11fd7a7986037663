"""
HTTP API for TreeDiff.
"""
