"""
Clinical feature pipeline: record model, tabular codec, analysis orchestration.
"""
