"""
models/ - Domain Models
=======================
Typed request objects built from caller payloads before anything is written.
"""
