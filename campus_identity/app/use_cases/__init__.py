"""
Use Cases

Organized by area:
- registration/: Student registration, lookup, email verification
- password/: Password reset
"""
