"""
Shared intermediate-data protocol used by both map and reduce workers
"""
