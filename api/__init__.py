"""
demodb HTTP API package
"""
