"""
Domain models, aggregation, row validation and events.
"""
