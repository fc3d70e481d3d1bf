"""
Example grammars built only from the public `combparse` API.
"""
