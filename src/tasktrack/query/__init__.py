"""
Query state: FilterSet model, canonical query-string codec and the store that owns them.
"""
