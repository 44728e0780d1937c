"""
Timeline Service - ranking and search for the code-snippet feed
"""
