"""
Command-line entry points for dpe_matcher.
"""
