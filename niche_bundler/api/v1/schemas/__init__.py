"""Modelos Pydantic de requests y responses."""
