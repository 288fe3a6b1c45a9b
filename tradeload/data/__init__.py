"""
Data module for the order generator.

Holds the immutable records shared across worker threads and the
value grids orders are sampled from.
"""
