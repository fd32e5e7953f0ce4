"""Fixture layout constants imported by scripts/gen_fixtures.py and the tests.

Kept outside tests/ so the generator script never imports test code.
"""
