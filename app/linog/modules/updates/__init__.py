"""
News-style updates shown on the public site, newest first.
"""
