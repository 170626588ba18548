"""
Box lifecycle rules: pure functions over box snapshots, no I/O
"""
