"""
Core request pipeline.
"""
