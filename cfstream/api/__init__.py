"""
HTTP surface for the Stream client.

Routes are thin: they validate input, call the StreamClient from
dependencies.py, and shape the response.
"""
