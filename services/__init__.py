"""
services/ - Business Logic Layer
================================
Workflows that span several repositories, such as order intake.
"""
