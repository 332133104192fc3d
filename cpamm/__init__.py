"""
cpamm: instruction-processing core of a constant-product AMM program.
"""
