"""
DocuDigitize - local document digitization workspace backend.
"""
__version__ = "1.0.0"
