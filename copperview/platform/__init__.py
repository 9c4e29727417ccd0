"""
Interactive front end (pygame window).
"""
