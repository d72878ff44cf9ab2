"""
Core domain logic: normalization, chunking, similarity ranking, grounding.

Pure and total on well-formed input; only I/O boundaries raise.
"""
