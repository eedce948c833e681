"""
doi-discovery — resolve numbered bibliographic references to DOIs.

Splits a pasted block of ``[n]``-labelled references into entries and looks
each one up, in order, against the Crossref works API.
"""

__version__ = "0.1.0"
