"""
GitHub Upload Relay
Accepts multipart uploads and commits them into a GitHub repository
"""

__version__ = "0.1.0"
