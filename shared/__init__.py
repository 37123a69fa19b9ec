"""
Shared Kernel

Error types and API plumbing shared by every MemberHub app.
"""
