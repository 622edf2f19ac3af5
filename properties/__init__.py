"""
properties package

Property panel for the selected node and the coercion rules behind it.
"""
