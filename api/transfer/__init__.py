"""
CSV bulk import/export.
"""
