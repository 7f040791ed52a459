"""
Ada - share anything, it's handled.
Classification, action suggestion and optimistic action execution for shared content
"""

__version__ = "1.0.0"
