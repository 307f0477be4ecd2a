"""
Pydantic schemas for the Sideout API.

Request models forbid unknown fields; response models read ORM attributes.
"""
