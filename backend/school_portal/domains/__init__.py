"""
Domain packages grouping services and repositories per business area.
"""
