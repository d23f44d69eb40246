"""
Resource listing, search and single-record CRUD.
"""
