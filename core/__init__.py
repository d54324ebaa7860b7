"""
Core of the missing-metafields auditor: models, errors, pagination and scan orchestration.
"""
