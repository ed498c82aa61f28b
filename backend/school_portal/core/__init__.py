"""
Core infrastructure: configuration, database, security, errors
"""
