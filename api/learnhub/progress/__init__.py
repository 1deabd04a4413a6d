"""Student course progress module.

Tracks per-chapter completion and overall progress for each enrolled user.
"""
