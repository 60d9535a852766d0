"""
Firm Normalizer: standardizes free-text financial firm names.
"""

__version__ = "1.0.0"
