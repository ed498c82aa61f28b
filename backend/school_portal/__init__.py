"""
School Portal backend package
"""
