"""Routing — ordered route table with compiled path patterns.

Routes are registered during setup and matched first-registered-wins.
"""
