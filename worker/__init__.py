"""
Worker-side map and reduce task execution
"""
