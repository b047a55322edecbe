"""
Pydantic schemas package.

Request and response models for every route; wire names are camelCase.
"""
