"""
User-defined resource types and the name -> id resolver.
"""
